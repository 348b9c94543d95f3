"""Subtree-width aware position assignment for the three view modes."""

from dataclasses import dataclass, field, fields
import logging

import networkx as nx

from graph import parents_of
from models import EdgeKind, FamilyView, RelationKind, RenderEdge, RenderNode, TreeNode, ViewMode
from tree_builder import iter_nodes, iter_view_nodes

logger = logging.getLogger(__name__)

Point = tuple[float, float]
Positions = dict[str, Point]

DOWN = 1
UP = -1


@dataclass
class LayoutConfig:
    node_width: float = 180.0
    level_height: float = 150.0
    spouse_offset: float = 100.0
    sibling_padding: float = 40.0
    frame_width: float = 80.0
    frame_height: float = 80.0
    min_gap: float = 10.0
    max_collision_iterations: int = 5
    canvas_width: float = 1200.0
    canvas_height: float = 800.0
    top_margin: float = 80.0
    bottom_margin: float = 100.0

    @classmethod
    def from_mapping(cls, data: dict) -> "LayoutConfig":
        """Build a config from a plain mapping, e.g. the ``layout`` section of an input file."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown layout settings: {', '.join(unknown)}")
        return cls(**data)

    def origin(self, mode: ViewMode) -> Point:
        """Canvas position of the hierarchy root for a view mode."""
        center_x = self.canvas_width / 2
        if mode == ViewMode.DESCENDANTS:
            return (center_x, self.top_margin)
        if mode == ViewMode.ANCESTORS:
            return (center_x, self.canvas_height - self.bottom_margin)
        return (center_x, self.canvas_height / 2)

    @property
    def frame(self) -> Point:
        return (self.frame_width, self.frame_height)


@dataclass
class Layout:
    positions: Positions
    root_id: str
    # spouse satellite id -> id of the primary node it is attached to
    satellites: dict[str, str] = field(default_factory=dict)
    generations: dict[str, int] = field(default_factory=dict)


class LayoutEngine:
    def __init__(self, config: LayoutConfig | None = None):
        self.config = config or LayoutConfig()

    def footprint(self, node: TreeNode) -> float:
        """Horizontal space of a node alone, spouses included."""
        return self.config.node_width + len(node.spouses) * self.config.spouse_offset

    def subtree_width(self, node: TreeNode) -> float:
        return self._width(node, {})

    def _width(self, node: TreeNode, cache: dict[str, float]) -> float:
        if node.id not in cache:
            # Reversed pre-order reaches every child before its parent
            for current in reversed(list(iter_nodes(node))):
                if current.id in cache:
                    continue
                children = sum(cache[child.id] for child in current.children)
                cache[current.id] = max(self.footprint(current), children)
        return cache[node.id]

    def _place(
        self,
        node: TreeNode,
        left: float,
        origin_y: float,
        direction: int,
        layout: Layout,
        cache: dict[str, float],
    ) -> None:
        """Place a subtree inside the band starting at `left`, children split left to right."""
        stack = [(node, left)]
        while stack:
            current, band_left = stack.pop()
            width = self._width(current, cache)
            x = band_left + (width - self.footprint(current)) / 2 + self.config.node_width / 2
            y = origin_y + direction * current.generation * self.config.level_height
            layout.positions[current.id] = (x, y)
            layout.generations[current.id] = current.generation

            children_width = sum(self._width(child, cache) for child in current.children)
            cursor = band_left + (width - children_width) / 2
            bands = []
            for child in current.children:
                bands.append((child, cursor))
                cursor += self._width(child, cache)
            stack.extend(reversed(bands))

    def _place_row(
        self,
        nodes: list[TreeNode],
        left: float,
        origin_y: float,
        direction: int,
        layout: Layout,
        cache: dict[str, float],
    ) -> float:
        """Place subtrees side by side from `left`; return the right edge of the row."""
        cursor = left
        for node in nodes:
            self._place(node, cursor, origin_y, direction, layout, cache)
            cursor += self._width(node, cache)
        return cursor

    def _root_left(self, node: TreeNode, center_x: float, cache: dict[str, float]) -> float:
        # Band left edge that puts the node itself (not its band) at center_x
        width = self._width(node, cache)
        return center_x - (width - self.footprint(node)) / 2 - self.config.node_width / 2

    def layout(self, view: FamilyView, positions: Positions | None = None) -> Layout:
        """
        Assign coordinates to every node of a built view.

        The given position store is cleared and refilled in place so that callers holding a
        reference keep seeing the current layout.

        Args:
            view: Output of the tree builder
            positions: Store to fill; a new dict is used when omitted

        Returns:
            Layout wrapping the filled store
        """
        if positions is None:
            positions = {}
        positions.clear()

        layout = Layout(positions=positions, root_id=view.root.id)
        cache: dict[str, float] = {}
        origin_x, origin_y = self.config.origin(view.mode)

        direction = UP if view.mode == ViewMode.ANCESTORS else DOWN
        root_left = self._root_left(view.root, origin_x, cache)
        self._place(view.root, root_left, origin_y, direction, layout, cache)

        if view.mode == ViewMode.BOTH:
            if view.ancestors:
                total = sum(self._width(node, cache) for node in view.ancestors)
                self._place_row(view.ancestors, origin_x - total / 2, origin_y, UP, layout, cache)
            if view.siblings:
                # The root band already covers the perspective, its spouses and descendants
                start = root_left + self._width(view.root, cache) + self.config.sibling_padding
                self._place_row(view.siblings, start, origin_y, DOWN, layout, cache)

        self._place_spouses(view, layout)
        logger.debug(
            "Placed %d nodes (%d spouse satellites) in %s mode",
            len(positions),
            len(layout.satellites),
            view.mode.value,
        )
        return layout

    def _place_spouses(self, view: FamilyView, layout: Layout) -> None:
        offset = self.config.spouse_offset
        for node in iter_view_nodes(view):
            x, y = layout.positions[node.id]
            placed = 0
            for spouse in node.spouses:
                if spouse.id in layout.positions:
                    # Already shown as a primary node or as another node's satellite
                    continue
                placed += 1
                layout.positions[spouse.id] = (x + offset * placed, y)
                layout.satellites[spouse.id] = node.id
                layout.generations[spouse.id] = node.generation


def edge_path(kind: EdgeKind, source: Point, target: Point) -> str:
    """SVG path for an edge: vertical cubic curve for parent-child, straight line for spouses."""
    sx, sy = source
    tx, ty = target
    if kind == EdgeKind.SPOUSE:
        return f"M{sx:g},{sy:g} L{tx:g},{ty:g}"
    my = (sy + ty) / 2
    return f"M{sx:g},{sy:g} C{sx:g},{my:g} {tx:g},{my:g} {tx:g},{ty:g}"


def build_edges(G: nx.DiGraph, view: FamilyView, layout: Layout) -> list[RenderEdge]:
    """
    Build parent-child and spouse edges for a laid-out view.

    Parent-child edges always run parent -> child, whichever direction the walk went.
    """
    positions = layout.positions
    edges: list[RenderEdge] = []
    seen: set[tuple] = set()

    def add(source_id: str, target_id: str, kind: EdgeKind) -> None:
        if kind == EdgeKind.SPOUSE:
            key = (kind, *sorted((source_id, target_id)))
        else:
            key = (kind, source_id, target_id)
        if key in seen or source_id not in positions or target_id not in positions:
            return
        seen.add(key)
        path = edge_path(kind, positions[source_id], positions[target_id])
        edges.append(RenderEdge(source_id, target_id, kind, path))

    upward_roots = [view.root] if view.mode == ViewMode.ANCESTORS else view.ancestors
    downward_roots = [] if view.mode == ViewMode.ANCESTORS else [view.root, *view.siblings]

    for top in downward_roots:
        for node in iter_nodes(top):
            for child in node.children:
                add(node.id, child.id, EdgeKind.PARENT_CHILD)

    for top in upward_roots:
        for node in iter_nodes(top):
            for parent in node.children:
                add(parent.id, node.id, EdgeKind.PARENT_CHILD)

    if view.mode == ViewMode.BOTH:
        for parent in view.ancestors:
            add(parent.id, view.root.id, EdgeKind.PARENT_CHILD)
        for sibling in view.siblings:
            for parent_id in parents_of(G, sibling.id):
                add(parent_id, sibling.id, EdgeKind.PARENT_CHILD)

    for node in iter_view_nodes(view):
        for spouse in node.spouses:
            add(node.id, spouse.id, EdgeKind.SPOUSE)

    # Couples where both partners are primary nodes, e.g. co-parents in an ancestor view
    for u, v, kind in G.edges(data="kind"):
        if kind == RelationKind.SPOUSE:
            add(u, v, EdgeKind.SPOUSE)

    return edges


def render_nodes(layout: Layout) -> list[RenderNode]:
    return [
        RenderNode(
            individual_id=pid,
            x=x,
            y=y,
            is_root=pid == layout.root_id,
            spouse_of=layout.satellites.get(pid),
            generation=layout.generations.get(pid, 0),
        )
        for pid, (x, y) in layout.positions.items()
    ]


def bounding_box(
    positions: Positions, frames: dict[str, Point] | None = None, default_frame: Point = (0.0, 0.0)
) -> tuple[float, float, float, float] | None:
    """Return (min_x, min_y, max_x, max_y) around every node frame, or None when empty."""
    if not positions:
        return None
    frames = frames or {}
    xs: list[float] = []
    ys: list[float] = []
    for pid, (x, y) in positions.items():
        w, h = frames.get(pid, default_frame)
        xs.extend((x - w / 2, x + w / 2))
        ys.extend((y - h / 2, y + h / 2))
    return (min(xs), min(ys), max(xs), max(ys))
