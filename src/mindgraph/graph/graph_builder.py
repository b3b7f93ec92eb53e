from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

from mindgraph.errors import NotFoundError, ValidationFailure
from mindgraph.graph.graph_schema import (
    Edge,
    MindMap,
    MindMapExport,
    Node,
    require_text,
)
from mindgraph.graph.graph_store import GraphStore
from mindgraph.utils.time import now_ms

logger = logging.getLogger("mindgraph.bulk")


@dataclass(frozen=True)
class BulkNodeItem:
    """
    One node of a bulk import, addressed by a batch-scoped ``temp_id``.
    """

    temp_id: str
    label: str
    position_x: float
    position_y: float
    level: int
    order: int
    parent_temp_id: Optional[str] = None
    content: Optional[str] = None
    color: Optional[str] = None


class BulkImporter:
    """
    Materializes a batch of client drafts into persisted nodes and edges.

    Items are inserted shallowest level first so that a parent is normally
    stored before any child that refers to it. A ``parent_temp_id`` that has
    not been seen yet at that point (cycle, level inversion, unknown id)
    silently leaves the item as a root.
    """

    def __init__(
        self,
        store: GraphStore,
        *,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self.clock = clock

    def create_bulk(
        self,
        mind_map_id: str,
        items: Sequence[BulkNodeItem],
    ) -> Dict[str, str]:
        self._validate(items)
        now = self.clock()

        with self.store.transaction() as store:
            if store.get_mind_map(mind_map_id) is None:
                raise NotFoundError("MindMap", mind_map_id)

            temp_to_real, unresolved = self._insert_items(
                store, mind_map_id, items, now, link_parents=True
            )

            current = store.get_mind_map(mind_map_id)
            store.patch_mind_map(
                mind_map_id,
                updated_at=max(current.updated_at, now),
            )

        if unresolved:
            logger.warning(
                "bulk import into %s: %d items had unresolved parents and became roots",
                mind_map_id,
                unresolved,
            )
        logger.info("bulk imported %d nodes into %s", len(temp_to_real), mind_map_id)
        return temp_to_real

    def import_mind_map(
        self,
        user_id: str,
        data: MindMapExport,
        new_title: Optional[str] = None,
    ) -> str:
        """
        Recreate an exported mind map as a new private mind map of
        ``user_id`` and return its id.

        Only the exported edges are recreated, so no companion edges are
        added on top of them. Edges whose endpoints do not resolve to an
        imported node are skipped.
        """
        items = [
            BulkNodeItem(
                temp_id=node.export_id,
                parent_temp_id=node.parent_export_id,
                label=node.label,
                content=node.content,
                position_x=node.position_x,
                position_y=node.position_y,
                color=node.color,
                level=node.level,
                order=node.order,
            )
            for node in data.nodes
        ]
        self._validate(items)

        now = self.clock()
        mind_map = MindMap.create(
            user_id=user_id,
            title=new_title or f"{data.title} (Imported)",
            description=data.description,
            main_topic=data.main_topic,
            now=now,
        )

        skipped = 0
        with self.store.transaction() as store:
            store.insert_mind_map(mind_map)
            export_to_real, _ = self._insert_items(
                store, mind_map.id, items, now, link_parents=False
            )

            for edge in data.edges:
                source_id = export_to_real.get(edge.source_export_id)
                target_id = export_to_real.get(edge.target_export_id)
                if source_id is None or target_id is None:
                    skipped += 1
                    continue
                store.insert_edge(
                    Edge.create(
                        mind_map_id=mind_map.id,
                        source_id=source_id,
                        target_id=target_id,
                        label=edge.label,
                        now=now,
                    )
                )

        if skipped:
            logger.warning(
                "import into %s: skipped %d edges with unresolved endpoints",
                mind_map.id,
                skipped,
            )
        logger.info(
            "imported mind map %s for user %s (%d nodes)",
            mind_map.id,
            user_id,
            len(export_to_real),
        )
        return mind_map.id

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _insert_items(
        store: GraphStore,
        mind_map_id: str,
        items: Sequence[BulkNodeItem],
        now: int,
        *,
        link_parents: bool,
    ) -> Tuple[Dict[str, str], int]:
        temp_to_real: Dict[str, str] = {}
        unresolved = 0

        # sorted() is stable: equal levels keep input order
        for item in sorted(items, key=lambda item: item.level):
            parent_id = None
            if item.parent_temp_id is not None:
                parent_id = temp_to_real.get(item.parent_temp_id)
                if parent_id is None:
                    unresolved += 1

            node = Node.create(
                mind_map_id=mind_map_id,
                parent_id=parent_id,
                label=item.label,
                content=item.content,
                position_x=item.position_x,
                position_y=item.position_y,
                color=item.color,
                level=item.level,
                order=item.order,
                now=now,
            )
            store.insert_node(node)
            temp_to_real[item.temp_id] = node.id

            if link_parents and parent_id is not None:
                store.insert_edge(
                    Edge.create(
                        mind_map_id=mind_map_id,
                        source_id=parent_id,
                        target_id=node.id,
                        now=now,
                    )
                )

        return temp_to_real, unresolved

    @staticmethod
    def _validate(items: Sequence[BulkNodeItem]) -> None:
        seen = set()
        for index, item in enumerate(items):
            require_text(item.temp_id, f"items[{index}].temp_id")
            require_text(item.label, f"items[{index}].label")
            if item.level < 0:
                raise ValidationFailure(
                    "level must be >= 0",
                    {"field": f"items[{index}].level"},
                )
            if item.temp_id in seen:
                raise ValidationFailure(
                    f"duplicate temp_id: {item.temp_id}",
                    {"field": f"items[{index}].temp_id"},
                )
            seen.add(item.temp_id)
