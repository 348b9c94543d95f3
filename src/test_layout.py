import pytest

from graph import build_graph
from layout import LayoutConfig, LayoutEngine, bounding_box, build_edges, edge_path
from models import EdgeKind, Individual, RelationshipType, TreeNode, ViewMode
from tree_builder import build_tree, iter_nodes


def _layout(individuals, relationships, perspective, mode, config=None):
    G = build_graph(individuals, relationships)
    view = build_tree(G, perspective, mode)
    engine = LayoutEngine(config)
    return G, view, engine.layout(view)


def test_descendant_layout_matches_example(small_family) -> None:
    _, view, layout = _layout(*small_family, "A", ViewMode.DESCENDANTS)

    assert layout.positions["A"] == (600.0, 80.0)
    assert layout.positions["B"] == (560.0, 230.0)
    assert layout.positions["C"] == (740.0, 230.0)
    assert layout.positions["S"] == (700.0, 80.0)
    assert layout.satellites == {"S": "A"}


def test_ancestor_layout_grows_upward(nuclear_family) -> None:
    _, _, layout = _layout(*nuclear_family, "P", ViewMode.ANCESTORS)

    # P's band is widened by its parents; P and its spouse S are centred over them
    assert layout.positions["P"] == (600.0, 700.0)
    assert layout.positions["F"] == (560.0, 550.0)
    assert layout.positions["M"] == (740.0, 550.0)
    assert layout.positions["S"] == (700.0, 700.0)


def test_family_view_layout(nuclear_family) -> None:
    _, _, layout = _layout(*nuclear_family, "P", ViewMode.BOTH)
    pos = layout.positions

    assert pos["P"] == (600.0, 400.0)
    assert pos["K"] == (650.0, 550.0)
    assert pos["F"] == (510.0, 250.0)
    assert pos["M"] == (690.0, 250.0)
    # Sibling sits right of the perspective's band plus padding
    assert pos["Q"] == (920.0, 400.0)
    assert pos["S"] == (700.0, 400.0)


def test_layout_refills_the_given_store(small_family) -> None:
    G = build_graph(*small_family)
    store = {"stale": (1.0, 2.0)}

    layout = LayoutEngine().layout(build_tree(G, "A", ViewMode.DESCENDANTS), store)

    assert layout.positions is store
    assert "stale" not in store
    assert set(store) == {"A", "B", "C", "S"}


def _random_tree(depth: int, fanout: int, spouses: int, prefix: str = "n") -> TreeNode:
    node = TreeNode(
        individual=Individual(prefix),
        spouses=[Individual(f"{prefix}s{i}") for i in range(spouses)],
    )
    if depth > 0:
        for i in range(fanout):
            node.children.append(_random_tree(depth - 1, (fanout + i) % 3 + 1, i % 3, f"{prefix}.{i}"))
    return node


@pytest.mark.parametrize("depth,fanout,spouses", [(0, 1, 3), (2, 2, 0), (3, 3, 2), (4, 1, 1)])
def test_subtree_width_is_monotone(depth, fanout, spouses) -> None:
    engine = LayoutEngine()
    root = _random_tree(depth, fanout, spouses)

    for node in iter_nodes(root):
        width = engine.subtree_width(node)
        assert width >= engine.footprint(node)
        if node.children:
            assert width >= sum(engine.footprint(c) for c in node.children)
            assert width >= sum(engine.subtree_width(c) for c in node.children)


def test_footprint_reserves_spouse_offsets() -> None:
    engine = LayoutEngine(LayoutConfig(node_width=100, spouse_offset=30))
    node = TreeNode(individual=Individual("x"), spouses=[Individual("a"), Individual("b")])

    assert engine.footprint(node) == 160


def test_edges_cover_every_link(nuclear_family) -> None:
    G, view, layout = _layout(*nuclear_family, "P", ViewMode.BOTH)

    edges = {(e.source_id, e.target_id, e.kind) for e in build_edges(G, view, layout)}

    assert edges == {
        ("P", "K", EdgeKind.PARENT_CHILD),
        ("F", "P", EdgeKind.PARENT_CHILD),
        ("M", "P", EdgeKind.PARENT_CHILD),
        ("F", "Q", EdgeKind.PARENT_CHILD),
        ("M", "Q", EdgeKind.PARENT_CHILD),
        ("P", "S", EdgeKind.SPOUSE),
        ("F", "M", EdgeKind.SPOUSE),
    }


def test_ancestor_edges_point_from_parent_to_child(nuclear_family) -> None:
    G, view, layout = _layout(*nuclear_family, "P", ViewMode.ANCESTORS)

    parent_edges = {
        (e.source_id, e.target_id)
        for e in build_edges(G, view, layout)
        if e.kind == EdgeKind.PARENT_CHILD
    }

    assert parent_edges == {("F", "P"), ("M", "P")}


def test_edge_paths() -> None:
    assert edge_path(EdgeKind.PARENT_CHILD, (600, 80), (560, 230)) == "M600,80 C600,155 560,155 560,230"
    assert edge_path(EdgeKind.SPOUSE, (600, 80), (700, 80)) == "M600,80 L700,80"


def test_bounding_box() -> None:
    assert bounding_box({}) is None
    box = bounding_box({"a": (0, 0), "b": (100, 50)}, default_frame=(20, 10))
    assert box == (-10, -5, 110, 55)


def test_config_rejects_unknown_settings() -> None:
    assert LayoutConfig.from_mapping({"node_width": 200}).node_width == 200
    with pytest.raises(ValueError, match="node_widht"):
        LayoutConfig.from_mapping({"node_widht": 200})


def test_spouse_already_placed_leaves_no_gap(small_family, person, rel) -> None:
    individuals, relationships = small_family
    individuals = [*individuals, person("Y")]
    # B's first spouse C is also a primary node, so Y takes the first slot
    relationships = [
        *relationships,
        rel("B", "C", RelationshipType.SPOUSE),
        rel("B", "Y", RelationshipType.SPOUSE),
    ]

    _, _, layout = _layout(individuals, relationships, "A", ViewMode.DESCENDANTS)

    bx, by = layout.positions["B"]
    assert layout.positions["Y"] == (bx + 100.0, by)
    assert layout.satellites == {"S": "A", "Y": "B"}


def test_deep_line_layout(long_line) -> None:
    _, _, layout = _layout(*long_line, "p0", ViewMode.DESCENDANTS)

    assert layout.positions["p0"] == (600.0, 80.0)
    assert layout.positions["p1499"] == (600.0, 80.0 + 1499 * 150.0)
