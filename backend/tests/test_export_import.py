import pytest

from mindgraph.errors import NotFoundError, ValidationFailure
from mindgraph.graph.graph_builder import BulkNodeItem
from mindgraph.graph.graph_schema import ExportedEdge, ExportedNode, MindMapExport


def _seed(importer, mutator, mind_map_id):
    mapping = importer.create_bulk(
        mind_map_id,
        [
            BulkNodeItem(temp_id="root", label="Root", position_x=0, position_y=0,
                         level=0, order=0, color="#ff0000"),
            BulkNodeItem(temp_id="a", parent_temp_id="root", label="A", position_x=-60,
                         position_y=90, level=1, order=0, content="first branch"),
            BulkNodeItem(temp_id="b", parent_temp_id="root", label="B", position_x=60,
                         position_y=90, level=1, order=1),
        ],
    )
    mutator.create_edge(
        mind_map_id=mind_map_id, source_id=mapping["a"], target_id=mapping["b"], label="relates"
    )
    return mapping


def test_export_replaces_store_ids(facade, importer, mutator, mind_map_id, clock):
    mapping = _seed(importer, mutator, mind_map_id)

    export = facade.export_mind_map(mind_map_id)

    assert export.version == "1.0"
    assert export.exported_at == clock.now
    assert export.title == "Ideas"
    assert [n.export_id for n in export.nodes] == ["node_0", "node_1", "node_2"]
    by_label = {n.label: n for n in export.nodes}
    assert by_label["Root"].parent_export_id is None
    assert by_label["Root"].color == "#ff0000"
    assert by_label["A"].parent_export_id == by_label["Root"].export_id
    assert by_label["A"].content == "first branch"

    pairs = {(e.source_export_id, e.target_export_id, e.label) for e in export.edges}
    assert (by_label["A"].export_id, by_label["B"].export_id, "relates") in pairs
    assert len(export.edges) == 3
    assert not any(real in repr(export) for real in mapping.values())


def test_export_missing_mind_map_raises(facade):
    with pytest.raises(NotFoundError):
        facade.export_mind_map("missing")


def test_round_trip_preserves_structure_and_free_form_edges(
    facade, importer, mutator, store, mind_map_id
):
    _seed(importer, mutator, mind_map_id)
    export = facade.export_mind_map(mind_map_id)

    copy_id = importer.import_mind_map("user-2", export)

    copy = facade.get_with_data(copy_id)
    assert copy.mind_map.user_id == "user-2"
    assert copy.mind_map.title == "Ideas (Imported)"
    assert copy.mind_map.is_public is False

    labels = {n.id: n.label for n in copy.nodes}
    parents = {n.label: labels.get(n.parent_id) for n in copy.nodes}
    assert parents == {"Root": None, "A": "Root", "B": "Root"}

    edges = {(labels[e.source_id], labels[e.target_id], e.label) for e in copy.edges}
    assert edges == {("Root", "A", None), ("Root", "B", None), ("A", "B", "relates")}
    # exported edges are not doubled by companion edges
    assert len(copy.edges) == 3

    original_ids = {n.id for n in store.nodes_by_mind_map(mind_map_id)}
    assert original_ids.isdisjoint(labels)


def test_import_uses_new_title_and_skips_unresolved_edges(importer, facade):
    export = MindMapExport(
        title="Outline",
        description="notes",
        main_topic="physics",
        nodes=[
            ExportedNode(export_id="node_1", parent_export_id="node_0", label="Child",
                         position_x=0, position_y=80, level=1, order=0),
            ExportedNode(export_id="node_0", label="Root", position_x=0, position_y=0,
                         level=0, order=0),
        ],
        edges=[
            ExportedEdge(source_export_id="node_0", target_export_id="node_1"),
            ExportedEdge(source_export_id="node_0", target_export_id="node_9"),
            ExportedEdge(source_export_id=None, target_export_id="node_1"),
        ],
        exported_at=0,
    )

    copy_id = importer.import_mind_map("user-1", export, new_title="Fresh")

    copy = facade.get_with_data(copy_id)
    assert copy.mind_map.title == "Fresh"
    assert copy.mind_map.description == "notes"
    assert copy.mind_map.main_topic == "physics"
    by_label = {n.label: n for n in copy.nodes}
    # shallower levels are inserted first, so the parent resolves
    assert by_label["Child"].parent_id == by_label["Root"].id
    assert [(e.source_id, e.target_id) for e in copy.edges] == [
        (by_label["Root"].id, by_label["Child"].id)
    ]


def test_invalid_import_writes_nothing(importer, store):
    export = MindMapExport(
        title="Broken",
        description=None,
        main_topic=None,
        nodes=[
            ExportedNode(export_id="node_0", label="x", position_x=0, position_y=0,
                         level=0, order=0),
            ExportedNode(export_id="node_0", label="y", position_x=0, position_y=0,
                         level=0, order=1),
        ],
        edges=[],
        exported_at=0,
    )

    with pytest.raises(ValidationFailure):
        importer.import_mind_map("user-1", export)

    assert store.mind_map_count() == 0
    assert store.node_count() == 0
