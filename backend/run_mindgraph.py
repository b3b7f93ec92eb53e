import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.app.config import AppConfig  # noqa: E402
from backend.app.services.mindmap_service import MindMapService  # noqa: E402
from mindgraph.graph.graph_builder import BulkNodeItem  # noqa: E402
from mindgraph.graph.graph_store import GraphStore  # noqa: E402


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger = logging.getLogger("mindgraph.run")
    config = AppConfig()

    service = MindMapService(store=GraphStore(), config=config.mindgraph)

    mind_map_id = service.create_mind_map(user_id="demo-user", title="Demo")
    mapping = service.import_generated(
        user_id="demo-user",
        action="ai:generateMindMap",
        mind_map_id=mind_map_id,
        items=[
            BulkNodeItem(temp_id="root", label="Demo", position_x=0, position_y=0, level=0, order=0),
            BulkNodeItem(temp_id="a", parent_temp_id="root", label="Branch A",
                         position_x=-150, position_y=120, level=1, order=0),
            BulkNodeItem(temp_id="b", parent_temp_id="root", label="Branch B",
                         position_x=150, position_y=120, level=1, order=1),
        ],
    )
    logger.info("id map: %s", json.dumps(mapping, indent=2))

    # Splice the root out: both branches become roots, edges are dropped.
    service.delete_node(mapping["root"])

    data = service.get_mind_map_with_data(mind_map_id)
    logger.info(
        json.dumps(
            {
                "mind_map": asdict(data.mind_map),
                "nodes": [asdict(n) for n in data.nodes],
                "edges": [asdict(e) for e in data.edges],
            },
            indent=2,
        )
    )
    status = service.check_rate_limit("demo-user", "ai:generateMindMap")
    logger.info("remaining ai:generateMindMap budget: %s", status.remaining)


if __name__ == "__main__":
    main()
