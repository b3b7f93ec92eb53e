import pytest

from mindgraph.errors import NotFoundError, ValidationFailure
from mindgraph.graph.graph_schema import Edge, MindMap, Node, NodePatch
from mindgraph.graph.graph_store import GraphStore


def _make_node(mind_map_id: str, label: str, *, parent_id: str | None = None, level: int = 0) -> Node:
    return Node.create(
        mind_map_id=mind_map_id,
        parent_id=parent_id,
        label=label,
        position_x=0.0,
        position_y=0.0,
        level=level,
        order=0,
        now=1,
    )


def _make_edge(mind_map_id: str, source: str, target: str) -> Edge:
    return Edge.create(mind_map_id=mind_map_id, source_id=source, target_id=target, now=1)


def test_graph_store_indexes_nodes_and_edges():
    store = GraphStore()

    a = _make_node("m1", "A")
    b = _make_node("m1", "B", parent_id=a.id, level=1)
    c = _make_node("m2", "C")
    for node in (a, b, c):
        store.insert_node(node)

    e1 = _make_edge("m1", a.id, b.id)
    e2 = _make_edge("m1", a.id, b.id)
    store.insert_edge(e1)
    store.insert_edge(e2)

    assert {n.id for n in store.nodes_by_mind_map("m1")} == {a.id, b.id}
    assert [n.id for n in store.nodes_by_parent(a.id)] == [b.id]
    assert {e.id for e in store.edges_by_source(a.id)} == {e1.id, e2.id}
    assert {e.id for e in store.edges_by_target(b.id)} == {e1.id, e2.id}
    assert {e.id for e in store.edges_by_mind_map("m1")} == {e1.id, e2.id}
    assert store.get_edge(e1.id) == e1
    assert store.edges_by_mind_map("m2") == []


def test_mind_maps_by_user_newest_first():
    store = GraphStore()
    old = MindMap.create(user_id="u", title="old", now=10)
    new = MindMap.create(user_id="u", title="new", now=20)
    other = MindMap.create(user_id="v", title="other", now=30)
    for m in (old, new, other):
        store.insert_mind_map(m)

    assert [m.title for m in store.mind_maps_by_user("u")] == ["new", "old"]


def test_patch_and_delete_missing_rows():
    store = GraphStore()

    with pytest.raises(NotFoundError):
        store.patch_node("missing", label="x")
    with pytest.raises(NotFoundError):
        store.delete_node("missing")
    with pytest.raises(NotFoundError):
        store.delete_mind_map("missing")

    assert store.delete_edge("missing") is False


def test_patch_node_moves_parent_index():
    store = GraphStore()
    a = _make_node("m", "A")
    b = _make_node("m", "B")
    c = _make_node("m", "C", parent_id=a.id, level=1)
    for node in (a, b, c):
        store.insert_node(node)

    store.patch_node(c.id, parent_id=b.id)

    assert store.nodes_by_parent(a.id) == []
    assert [n.id for n in store.nodes_by_parent(b.id)] == [c.id]


def test_dangling_edge_endpoint_is_not_a_node():
    store = GraphStore()
    child = _make_node("m", "child", parent_id="ghost", level=1)
    store.insert_node(child)
    edge = _make_edge("m", "ghost", child.id)
    store.insert_edge(edge)

    assert store.get_node("ghost") is None
    assert store.node_count() == 1
    assert [e.id for e in store.edges_by_source("ghost")] == [edge.id]

    store.delete_edge(edge.id)
    assert "ghost" not in store._graph


def test_transaction_rolls_back_on_error():
    store = GraphStore()
    a = _make_node("m", "A")
    store.insert_node(a)

    with pytest.raises(RuntimeError):
        with store.transaction():
            store.insert_node(_make_node("m", "B"))
            store.patch_node(a.id, label="changed")
            raise RuntimeError("boom")

    assert [n.id for n in store.nodes_by_mind_map("m")] == [a.id]
    assert store.get_node(a.id).label == "A"


def test_nested_transaction_joins_outer():
    store = GraphStore()

    with pytest.raises(RuntimeError):
        with store.transaction():
            with store.transaction():
                store.insert_node(_make_node("m", "inner"))
            raise RuntimeError("outer failure")

    assert store.node_count() == 0


def test_node_patch_only_reports_present_fields():
    patch = NodePatch(label="New", position_x=3.5)
    assert patch.changes() == {"label": "New", "position_x": 3.5}
    assert NodePatch().is_empty()

    with pytest.raises(ValidationFailure):
        NodePatch(label="  ")


def test_rollback_restores_deleted_and_patched_rows():
    store = GraphStore()
    mind_map = MindMap.create(user_id="u", title="T", now=1)
    store.insert_mind_map(mind_map)
    root = _make_node(mind_map.id, "root")
    child = _make_node(mind_map.id, "child", parent_id=root.id, level=1)
    store.insert_node(root)
    store.insert_node(child)
    edge = _make_edge(mind_map.id, root.id, child.id)
    store.insert_edge(edge)

    with pytest.raises(RuntimeError):
        with store.transaction():
            store.patch_node(child.id, parent_id=None)
            store.delete_edge(edge.id)
            store.delete_node(root.id)
            store.patch_mind_map(mind_map.id, title="renamed")
            store.delete_mind_map(mind_map.id)
            raise RuntimeError("boom")

    assert store.get_mind_map(mind_map.id) == mind_map
    assert store.mind_maps_by_user("u") == [mind_map]
    assert store.get_node(root.id) == root
    assert store.get_node(child.id).parent_id == root.id
    assert [n.id for n in store.nodes_by_parent(root.id)] == [child.id]
    assert store.get_edge(edge.id) == edge
    assert store.edges_by_source(root.id) == [edge]


def test_rollback_of_insert_drops_placeholder_endpoint():
    store = GraphStore()

    with pytest.raises(RuntimeError):
        with store.transaction():
            store.insert_edge(_make_edge("m", "ghost-a", "ghost-b"))
            raise RuntimeError("boom")

    assert store.edge_count() == 0
    assert "ghost-a" not in store._graph
    assert "ghost-b" not in store._graph
