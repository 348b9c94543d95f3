"""NetworkX graph building and neighbour queries."""

import logging

import networkx as nx

from models import Individual, RelationKind, Relationship

logger = logging.getLogger(__name__)


def build_graph(individuals: list[Individual], relationships: list[Relationship]) -> nx.DiGraph:
    """
    Build a NetworkX directed graph from the flat individual and relationship lists.

    Parent-child edges always point parent -> child. Spouse and sibling edges keep the
    order given by the relationship (individual1 -> individual2); queries for those kinds
    look at both directions.

    Relationships referencing an unknown individual are dropped. The number dropped is
    kept in ``G.graph["dangling"]`` so validation can report it.
    """
    G = nx.DiGraph()
    G.graph["dangling"] = 0

    # Insertion order is kept by networkx and drives every traversal order downstream
    for person in individuals:
        G.add_node(person.id, individual=person)

    for rel in relationships:
        if rel.individual1_id not in G or rel.individual2_id not in G:
            logger.debug(
                "Skipping relationship %s: references missing individual (%s, %s)",
                rel.id,
                rel.individual1_id,
                rel.individual2_id,
            )
            G.graph["dangling"] += 1
            continue

        if rel.individual1_id == rel.individual2_id:
            logger.debug("Skipping self-referencing relationship %s", rel.id)
            continue

        if G.has_edge(rel.individual1_id, rel.individual2_id):
            # First relationship between an ordered pair wins
            logger.debug("Duplicate relationship %s ignored", rel.id)
            continue

        G.add_edge(
            rel.individual1_id,
            rel.individual2_id,
            relationship_id=rel.id,
            relationship_type=rel.relationship_type,
            kind=rel.kind,
        )

    return G


def individual(G: nx.DiGraph, person_id: str) -> Individual:
    return G.nodes[person_id]["individual"]


def children_of(G: nx.DiGraph, person_id: str) -> list[str]:
    """Return child ids of a person, in relationship order."""
    return [
        child
        for child in G.successors(person_id)
        if G.edges[person_id, child]["kind"] == RelationKind.PARENT_CHILD
    ]


def parents_of(G: nx.DiGraph, person_id: str) -> list[str]:
    """Return parent ids of a person, in relationship order."""
    return [
        parent
        for parent in G.predecessors(person_id)
        if G.edges[parent, person_id]["kind"] == RelationKind.PARENT_CHILD
    ]


def _undirected_neighbours(G: nx.DiGraph, person_id: str, kind: RelationKind) -> list[str]:
    out: list[str] = []
    for neighbour in G.successors(person_id):
        if G.edges[person_id, neighbour]["kind"] == kind:
            out.append(neighbour)
    for neighbour in G.predecessors(person_id):
        if G.edges[neighbour, person_id]["kind"] == kind and neighbour not in out:
            out.append(neighbour)
    return out


def spouses_of(G: nx.DiGraph, person_id: str) -> list[str]:
    """Return spouse and partner ids of a person."""
    return _undirected_neighbours(G, person_id, RelationKind.SPOUSE)


def siblings_of(G: nx.DiGraph, person_id: str) -> list[str]:
    """
    Return sibling ids of a person, excluding the person.

    Siblings are individuals sharing at least one parent, followed by anyone linked
    through an explicit sibling relationship.
    """
    out: list[str] = []
    for parent in parents_of(G, person_id):
        for child in children_of(G, parent):
            if child != person_id and child not in out:
                out.append(child)
    for sibling in _undirected_neighbours(G, person_id, RelationKind.SIBLING):
        if sibling not in out:
            out.append(sibling)
    return out


def has_parents(G: nx.DiGraph, person_id: str) -> bool:
    return bool(parents_of(G, person_id))
