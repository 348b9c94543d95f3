"""Default perspective selection."""

import logging

import networkx as nx

from graph import has_parents, individual
from models import Individual, RelationKind

logger = logging.getLogger(__name__)


def count_descendants(G: nx.DiGraph, person_id: str) -> int:
    """
    Count everyone reachable downward from a person through parent-child edges.

    Each person is counted at most once, so loops in malformed data terminate.
    """
    lineage = nx.subgraph_view(
        G, filter_edge=lambda u, v: G.edges[u, v]["kind"] == RelationKind.PARENT_CHILD
    )
    return len(nx.descendants(lineage, person_id))


def _rank(G: nx.DiGraph, person_id: str) -> tuple:
    person = individual(G, person_id)
    # Most descendants, then dated before undated, earliest birth, then id
    return (
        -count_descendants(G, person_id),
        person.birth_date is None,
        person.birth_date or "",
        person_id,
    )


def find_root_individual(G: nx.DiGraph) -> Individual | None:
    """
    Pick the default perspective for a graph.

    Candidates are individuals without a parent. With several candidates the one with
    the most descendants wins; ties go to the earliest birth date, a known birth date
    beats an unknown one, and remaining ties go to the smallest id.

    Returns:
        The chosen individual, or None when the graph has no individuals.
    """
    if G.number_of_nodes() == 0:
        return None

    candidates = [pid for pid in G.nodes if not has_parents(G, pid)]

    if not candidates:
        first = next(iter(G.nodes))
        logger.warning("No root individual found, using first individual %s", first)
        return individual(G, first)

    if len(candidates) == 1:
        return individual(G, candidates[0])

    best = min(candidates, key=lambda pid: _rank(G, pid))
    logger.debug(
        "Selected root %s out of %d candidates", individual(G, best).full_name, len(candidates)
    )
    return individual(G, best)
