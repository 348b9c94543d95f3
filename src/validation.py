"""Graph validation for family tree data."""

import networkx as nx

from models import RelationKind


def validate_graph(G: nx.DiGraph) -> list[str]:
    """
    Validate the family tree graph for:
    - Relationships dropped because they reference a missing individual
    - Cycles in parent-child relationships
    - Impossible ages (child born before parent)
    - Date ordering issues

    None of these stop a layout; the tree builder is cycle-safe. Returns a list of
    warning messages.
    """
    warnings: list[str] = []

    dangling = G.graph.get("dangling", 0)
    if dangling:
        warnings.append(f"Dropped {dangling} relationship(s) referencing missing individuals")

    # Create a subgraph with only parent-child edges for cycle detection
    parent_edges = [
        (u, v) for u, v, d in G.edges(data=True) if d.get("kind") == RelationKind.PARENT_CHILD
    ]
    parent_graph = nx.DiGraph(parent_edges)

    try:
        cycle = nx.find_cycle(parent_graph, orientation="original")
        cycle_nodes = [edge[0] for edge in cycle]
        warnings.append(f"Cycle detected in parent-child relationships: {cycle_nodes}")
    except nx.NetworkXNoCycle:
        pass

    # ISO dates (YYYY-MM-DD) compare correctly as strings
    for parent, child in parent_edges:
        parent_person = G.nodes[parent]["individual"]
        child_person = G.nodes[child]["individual"]
        parent_birth = parent_person.birth_date
        child_birth = child_person.birth_date

        if parent_birth and child_birth:
            if child_birth < parent_birth:
                warnings.append(
                    f"Impossible: {child_person.full_name} born before parent "
                    f"{parent_person.full_name}"
                )
            else:
                # Records built outside the loader may carry free-text dates
                try:
                    parent_year = int(parent_birth[:4])
                    child_year = int(child_birth[:4])
                    if child_year - parent_year < 12:
                        warnings.append(
                            f"Suspicious: {parent_person.full_name} was less than 12 years "
                            f"old when {child_person.full_name} was born"
                        )
                except (ValueError, IndexError):
                    pass

    for _, data in G.nodes(data=True):
        person = data["individual"]
        if person.birth_date and person.death_date and person.death_date < person.birth_date:
            warnings.append(f"Impossible: {person.full_name} died before being born")

    return warnings
