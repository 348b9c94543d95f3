import pytest

from graph import build_graph
from models import RelationshipType, ViewMode
from tree_builder import build_tree, iter_nodes, primary_ids


def _ids(node) -> list[str]:
    return [n.id for n in iter_nodes(node)]


def test_descendant_tree_collects_children_and_spouses(nuclear_family) -> None:
    G = build_graph(*nuclear_family)

    view = build_tree(G, "F", ViewMode.DESCENDANTS)

    root = view.root
    assert [c.id for c in root.children] == ["P", "Q"]
    assert [s.id for s in root.spouses] == ["M"]
    assert [s.id for s in root.children[0].spouses] == ["S"]
    assert [c.id for c in root.children[0].children] == ["K"]
    assert root.children[0].children[0].generation == 2
    assert view.ancestors == [] and view.siblings == []


def test_ancestor_tree_lists_father_first(nuclear_family) -> None:
    G = build_graph(*nuclear_family)

    view = build_tree(G, "P", ViewMode.ANCESTORS)

    # Mother's relationship comes first in the data
    assert [p.id for p in view.root.children] == ["F", "M"]
    # Co-parents are primary nodes, not each other's satellites
    assert all(p.spouses == [] for p in view.root.children)
    assert [s.id for s in view.root.spouses] == ["S"]
    assert view.ancestor_count == 2
    assert view.max_generation == 1


def test_family_view_has_ancestors_siblings_and_descendants(nuclear_family) -> None:
    G = build_graph(*nuclear_family)

    view = build_tree(G, "P", ViewMode.BOTH)

    assert _ids(view.root) == ["P", "K"]
    assert [a.id for a in view.ancestors] == ["F", "M"]
    assert all(a.generation == 1 for a in view.ancestors)
    assert [s.id for s in view.siblings] == ["Q"]


def test_sibling_carries_its_own_descendants(nuclear_family) -> None:
    G = build_graph(*nuclear_family)

    view = build_tree(G, "Q", ViewMode.BOTH)

    assert [s.id for s in view.siblings] == ["P"]
    assert _ids(view.siblings[0]) == ["P", "K"]
    assert [s.id for s in view.siblings[0].spouses] == ["S"]


def test_parent_child_cycle_terminates(person, rel) -> None:
    G = build_graph([person(p) for p in "ABC"], [rel("A", "B"), rel("B", "C"), rel("C", "A")])

    assert _ids(build_tree(G, "A", ViewMode.DESCENDANTS).root) == ["A", "B", "C"]
    assert _ids(build_tree(G, "A", ViewMode.ANCESTORS).root) == ["A", "C", "B"]


def test_no_duplicate_primary_nodes_in_any_view(person, rel) -> None:
    # Cousins marry, and the data also loops back to the founder
    individuals = [person(p) for p in ["G1", "G2", "A", "B", "C", "D", "E"]]
    relationships = [
        rel("G1", "A"),
        rel("G1", "B"),
        rel("G2", "A"),
        rel("G2", "B"),
        rel("G1", "G2", RelationshipType.SPOUSE),
        rel("A", "C"),
        rel("B", "D"),
        rel("C", "D", RelationshipType.SPOUSE),
        rel("C", "E"),
        rel("D", "E"),
        rel("E", "G1"),
        rel("A", "D", RelationshipType.HALF_SIBLING),
    ]
    G = build_graph(individuals, relationships)

    for pid in G.nodes:
        for mode in ViewMode:
            ids = primary_ids(build_tree(G, pid, mode))
            assert len(ids) == len(set(ids)), (pid, mode, ids)


def test_generation_limit(person, rel) -> None:
    G = build_graph([person(p) for p in "ABCD"], [rel("A", "B"), rel("B", "C"), rel("C", "D")])

    assert _ids(build_tree(G, "A", ViewMode.DESCENDANTS, max_generations=2).root) == ["A", "B", "C"]
    assert _ids(build_tree(G, "D", ViewMode.ANCESTORS, max_generations=1).root) == ["D", "C"]
    view = build_tree(G, "C", ViewMode.BOTH, max_generations=0)
    assert _ids(view.root) == ["C"] and view.ancestors == []


def test_dangling_reference_is_skipped(person, rel) -> None:
    G = build_graph([person("A"), person("B")], [rel("A", "B"), rel("A", "missing")])

    assert _ids(build_tree(G, "A", ViewMode.DESCENDANTS).root) == ["A", "B"]


def test_unknown_perspective_raises(small_family) -> None:
    G = build_graph(*small_family)

    with pytest.raises(ValueError, match="not found"):
        build_tree(G, "nobody", ViewMode.BOTH)


def test_deep_lines_are_walked_without_recursion(long_line) -> None:
    G = build_graph(*long_line)

    assert _ids(build_tree(G, "p0", ViewMode.DESCENDANTS).root) == [f"p{i}" for i in range(1500)]

    ancestors = build_tree(G, "p1499", ViewMode.ANCESTORS)
    assert ancestors.ancestor_count == 1499
    assert ancestors.max_generation == 1499

    # p750 and below, then p749 up to p0
    assert len(primary_ids(build_tree(G, "p750", ViewMode.BOTH))) == 1500
