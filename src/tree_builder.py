"""Cycle-safe hierarchy construction from a perspective person."""

from collections.abc import Iterator
import logging

import networkx as nx

from graph import children_of, individual, parents_of, siblings_of, spouses_of
from models import FamilyView, Gender, TreeNode, ViewMode

logger = logging.getLogger(__name__)


def _collect_spouses(G: nx.DiGraph, person_id: str, visited: set[str], exclude=()) -> list:
    return [
        individual(G, sp)
        for sp in spouses_of(G, person_id)
        if sp not in visited and sp not in exclude
    ]


def _sorted_parents(G: nx.DiGraph, person_id: str) -> list[str]:
    # Father first when both are known; otherwise relationship order is kept (stable sort)
    return sorted(parents_of(G, person_id), key=lambda pid: individual(G, pid).gender != Gender.MALE)


def _walk(
    G: nx.DiGraph,
    root_id: str,
    visited: set[str],
    max_generations: int | None,
    generation: int,
    next_ids,
    exclude: tuple = (),
    exclude_co_parents: bool = False,
) -> TreeNode | None:
    # Pre-order on an explicit stack: a subtree is finished before its next sibling starts
    root: TreeNode | None = None
    # (person id, generation, ids kept out of its spouses, node it hangs from)
    stack: list[tuple[str, int, tuple, TreeNode | None]] = [(root_id, generation, tuple(exclude), None)]
    while stack:
        person_id, gen, skip, attach_to = stack.pop()
        if person_id in visited:
            continue
        visited.add(person_id)

        node = TreeNode(individual=individual(G, person_id), generation=gen)
        node.spouses = _collect_spouses(G, person_id, visited, skip)
        if attach_to is None:
            root = node
        else:
            attach_to.children.append(node)

        if max_generations is not None and gen - generation >= max_generations:
            continue

        ids = next_ids(G, person_id)
        nested = tuple(ids) if exclude_co_parents else ()
        for next_id in reversed(ids):
            stack.append((next_id, gen + 1, nested, node))
    return root


def build_descendant_tree(
    G: nx.DiGraph,
    root_id: str,
    visited: set[str] | None = None,
    max_generations: int | None = None,
    generation: int = 0,
) -> TreeNode | None:
    """
    Walk parent -> child edges outward from root_id.

    Args:
        G: The full graph
        root_id: Person to start from
        visited: Primary-node ids already placed; shared across walks of one view
        max_generations: Stop expanding below this many generations (None = unlimited)
        generation: Generation number given to root_id

    Returns:
        The root TreeNode, or None if root_id was already visited
    """
    if visited is None:
        visited = set()
    return _walk(G, root_id, visited, max_generations, generation, children_of)


def build_ancestor_tree(
    G: nx.DiGraph,
    root_id: str,
    visited: set[str] | None = None,
    max_generations: int | None = None,
    generation: int = 0,
    co_parents: tuple = (),
) -> TreeNode | None:
    """
    Walk child -> parent edges upward from root_id.

    The returned node's `children` are its parents. A parent's co-parents are left out of
    its spouse list because they appear as primary nodes beside it.
    """
    if visited is None:
        visited = set()
    return _walk(
        G,
        root_id,
        visited,
        max_generations,
        generation,
        _sorted_parents,
        exclude=co_parents,
        exclude_co_parents=True,
    )


def iter_nodes(node: TreeNode) -> Iterator[TreeNode]:
    """Yield a node and everything below it, depth first."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def iter_view_nodes(view: FamilyView) -> Iterator[TreeNode]:
    yield from iter_nodes(view.root)
    for node in view.ancestors:
        yield from iter_nodes(node)
    for node in view.siblings:
        yield from iter_nodes(node)


def primary_ids(view: FamilyView) -> list[str]:
    return [node.id for node in iter_view_nodes(view)]


def build_family_view(
    G: nx.DiGraph, perspective_id: str, max_generations: int | None = None
) -> FamilyView:
    """
    Build the both-mode view: descendants below, ancestors above, siblings beside.

    All three walks share one visited set, so a person reached by the descendant walk is
    never placed again as an ancestor or sibling.
    """
    visited: set[str] = set()
    root = build_descendant_tree(G, perspective_id, visited, max_generations)

    ancestors: list[TreeNode] = []
    if max_generations is None or max_generations > 0:
        parents = _sorted_parents(G, perspective_id)
        remaining = None if max_generations is None else max_generations - 1
        for parent_id in parents:
            node = build_ancestor_tree(G, parent_id, visited, remaining, 1, tuple(parents))
            if node is not None:
                ancestors.append(node)

    siblings: list[TreeNode] = []
    for sibling_id in siblings_of(G, perspective_id):
        node = build_descendant_tree(G, sibling_id, visited, max_generations)
        if node is not None:
            siblings.append(node)

    view = FamilyView(mode=ViewMode.BOTH, root=root, ancestors=ancestors, siblings=siblings)
    ancestor_nodes = [n for a in ancestors for n in iter_nodes(a)]
    view.ancestor_count = len(ancestor_nodes)
    view.max_generation = max((n.generation for n in ancestor_nodes), default=0)
    return view


def build_tree(
    G: nx.DiGraph,
    perspective_id: str,
    mode: ViewMode,
    max_generations: int | None = None,
) -> FamilyView:
    """Build the hierarchy for one perspective and view mode."""
    if perspective_id not in G:
        raise ValueError(f"Person ID {perspective_id} not found in graph")

    mode = ViewMode(mode)
    if mode == ViewMode.BOTH:
        view = build_family_view(G, perspective_id, max_generations)
    elif mode == ViewMode.ANCESTORS:
        root = build_ancestor_tree(G, perspective_id, max_generations=max_generations)
        view = FamilyView(mode=mode, root=root)
        upward = list(iter_nodes(root))[1:]
        view.ancestor_count = len(upward)
        view.max_generation = max((n.generation for n in upward), default=0)
    else:
        root = build_descendant_tree(G, perspective_id, max_generations=max_generations)
        view = FamilyView(mode=mode, root=root)

    logger.debug(
        "Built %s tree from %s with %d primary nodes",
        mode.value,
        perspective_id,
        len(primary_ids(view)),
    )
    return view
