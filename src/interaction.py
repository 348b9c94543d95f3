"""Perspective, view-mode and drag state for an interactive tree view."""

from enum import Enum
import logging

from collision import CollisionReport, resolve_collisions
from graph import build_graph, individual
from layout import Layout, LayoutConfig, LayoutEngine, build_edges, edge_path, render_nodes
from models import (
    FamilyView,
    Individual,
    NavigationIntent,
    Perspective,
    Relationship,
    RenderEdge,
    RenderNode,
    ViewMode,
)
from root_selection import find_root_individual
from tree_builder import build_tree

logger = logging.getLogger(__name__)


class RebuildStatus(str, Enum):
    OK = "ok"
    EMPTY_GRAPH = "empty_graph"
    CONTAINER_NOT_READY = "container_not_ready"


class InteractionController:
    """
    Owns the current perspective, view mode and history, and the one position store.

    Every rebuild runs tree building, layout and collision resolution against
    `self.positions`; drags edit the same dict. Nothing here keeps a second copy.
    """

    def __init__(
        self,
        individuals: list[Individual],
        relationships: list[Relationship],
        perspective_id: str | None = None,
        view_mode: ViewMode = ViewMode.BOTH,
        config: LayoutConfig | None = None,
        max_generations: int | None = None,
        surface_ready: bool = True,
    ):
        self.G = build_graph(individuals, relationships)
        self.config = config or LayoutConfig()
        self.engine = LayoutEngine(self.config)
        self.max_generations = max_generations

        # An empty tree is reported by rebuild(), whatever perspective came with it
        if perspective_id is not None and self.G.number_of_nodes() > 0:
            self._require(perspective_id)
        self.perspective = Perspective(perspective_id, ViewMode(view_mode))
        self.history: list[Perspective] = []

        self.positions: dict[str, tuple[float, float]] = {}
        self.edges: list[RenderEdge] = []
        self.view: FamilyView | None = None
        self.layout: Layout | None = None
        self.root: Individual | None = None
        self.collision_report: CollisionReport | None = None

        self.surface_ready = surface_ready
        self._pending_rebuild = False
        self._drag: dict | None = None

        self.status = self.rebuild()

    @property
    def state(self) -> str:
        return "defaultView" if self.perspective.individual_id is None else "perspectiveView"

    @property
    def view_mode(self) -> ViewMode:
        return self.perspective.view_mode

    def individual(self, person_id: str) -> Individual:
        return individual(self.G, person_id)

    def _require(self, person_id: str) -> None:
        if person_id not in self.G:
            raise ValueError(f"Person ID {person_id} not found in graph")

    # ------------------------------------------------------------------
    # Rebuild
    # ------------------------------------------------------------------

    def rebuild(self) -> RebuildStatus:
        """Run tree building, layout and collision resolution for the current perspective."""
        if not self.surface_ready:
            self._pending_rebuild = True
            self.status = RebuildStatus.CONTAINER_NOT_READY
            return self.status
        self._pending_rebuild = False
        self._drag = None

        if self.G.number_of_nodes() == 0:
            logger.warning("No individuals in tree; nothing to lay out")
            self.positions.clear()
            self.edges = []
            self.view = None
            self.layout = None
            self.root = None
            self.status = RebuildStatus.EMPTY_GRAPH
            return self.status

        if self.perspective.individual_id is None:
            self.root = find_root_individual(self.G)
        else:
            self.root = self.individual(self.perspective.individual_id)

        self.view = build_tree(self.G, self.root.id, self.view_mode, self.max_generations)
        self.layout = self.engine.layout(self.view, self.positions)
        self.collision_report = resolve_collisions(
            self.positions,
            default_frame=self.config.frame,
            min_gap=self.config.min_gap,
            max_iterations=self.config.max_collision_iterations,
        )
        self.edges = build_edges(self.G, self.view, self.layout)

        logger.info(
            "Laid out %d nodes around %s (%s view)",
            len(self.positions),
            self.root.full_name,
            self.view_mode.value,
        )
        self.status = RebuildStatus.OK
        return self.status

    def attach_surface(self) -> RebuildStatus:
        """Mark the drawing surface ready and run any rebuild that was waiting for it."""
        self.surface_ready = True
        if self._pending_rebuild:
            return self.rebuild()
        return self.status

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _go_to(self, target: Perspective) -> RebuildStatus:
        if target != self.perspective:
            self.history.append(self.perspective)
        self.perspective = target
        return self.rebuild()

    def change_perspective(self, person_id: str) -> RebuildStatus:
        self._require(person_id)
        return self._go_to(Perspective(person_id, self.view_mode))

    def set_as_root(self, person_id: str) -> RebuildStatus:
        """Re-root on a person; from the ancestors view this switches to their descendants."""
        self._require(person_id)
        mode = ViewMode.DESCENDANTS if self.view_mode == ViewMode.ANCESTORS else self.view_mode
        return self._go_to(Perspective(person_id, mode))

    def set_view_mode(self, mode: ViewMode) -> RebuildStatus:
        return self._go_to(Perspective(self.perspective.individual_id, ViewMode(mode)))

    def return_to_previous(self) -> RebuildStatus:
        if self.history:
            self.perspective = self.history.pop()
        else:
            self.perspective = Perspective(None, ViewMode.BOTH)
        return self.rebuild()

    def on_node_click(self, person_id: str) -> NavigationIntent:
        return NavigationIntent("open_detail", person_id)

    def view_individual(self, person_id: str) -> NavigationIntent:
        self.set_as_root(person_id)
        return NavigationIntent("re_root", person_id)

    # ------------------------------------------------------------------
    # Dragging
    # ------------------------------------------------------------------

    def drag(self, person_id: str, x: float, y: float) -> bool:
        """
        Move one node and redraw only the edges touching it.

        Returns:
            False when the id has no position in the current layout
        """
        if person_id not in self.positions:
            logger.debug("Ignoring drag of %s: not in the current layout", person_id)
            return False

        self.positions[person_id] = (float(x), float(y))
        for edge in self.edges:
            if person_id in (edge.source_id, edge.target_id):
                edge.path = edge_path(
                    edge.kind, self.positions[edge.source_id], self.positions[edge.target_id]
                )
        return True

    def drag_start(self, person_id: str, x: float, y: float) -> bool:
        if person_id not in self.positions:
            return False
        self._drag = {"id": person_id, "start": (x, y), "moved": False}
        return True

    def drag_move(self, person_id: str, x: float, y: float) -> bool:
        if self._drag is None or self._drag["id"] != person_id:
            return False
        self._drag["moved"] = True
        return self.drag(person_id, x, y)

    def drag_end(self, person_id: str, x: float, y: float) -> bool:
        """Finish a drag gesture. Returns True when the pointer never moved (a click)."""
        if self._drag is None or self._drag["id"] != person_id:
            return False
        was_click = not self._drag["moved"]
        if not was_click:
            self.drag(person_id, x, y)
        self._drag = None
        return was_click

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def render_nodes(self) -> list[RenderNode]:
        if self.layout is None:
            return []
        return render_nodes(self.layout)

    def render_edges(self) -> list[RenderEdge]:
        return list(self.edges)
