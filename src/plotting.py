"""Visualization functions for laid-out family trees."""

from pathlib import Path

import matplotlib.pyplot as plt
from matplotlib.patches import Circle, PathPatch
from matplotlib.path import Path as MplPath
import pydot

from interaction import InteractionController
from layout import bounding_box
from models import EdgeKind, Gender, Individual, NavigationIntent, RenderNode, ViewMode

GENDER_COLORS = {
    Gender.MALE: "lightblue",
    Gender.FEMALE: "lightpink",
}

# Ancestor views colour by generation: self, parents, grandparents, ...
GENERATION_COLORS = [
    "#4CAF50",
    "#2196F3",
    "#9C27B0",
    "#FF9800",
    "#F44336",
    "#00BCD4",
    "#795548",
    "#607D8B",
    "#E91E63",
    "#3F51B5",
    "#009688",
]

POINTS_PER_INCH = 72.0


def node_color(person: Individual, node: RenderNode, mode: ViewMode) -> str:
    if mode == ViewMode.ANCESTORS and node.spouse_of is None:
        return GENERATION_COLORS[min(node.generation, len(GENERATION_COLORS) - 1)]
    return GENDER_COLORS.get(person.gender, "lightgray")


def node_label(person: Individual) -> str:
    given_name = person.given_name or ""
    surname = person.surname or ""
    return f"{given_name}\n{surname}\n{person.life_years}".strip("\n")


def build_dot(controller: InteractionController) -> pydot.Dot:
    """
    Build a pydot graph with every node pinned at its computed position.

    Graphviz is only used to draw: positions come from the controller's store, so the
    graph is meant to be rendered with ``neato`` (pinned ``pos`` attributes, points units).
    """
    config = controller.config
    P = pydot.Dot(graph_type="digraph")
    P.set("layout", "neato")
    P.set("inputscale", str(POINTS_PER_INCH))
    P.set("splines", "true")
    P.set("outputorder", "edgesfirst")

    for node in controller.render_nodes():
        person = controller.individual(node.individual_id)
        # Graphviz y grows upward, layout y grows downward
        attrs = dict(
            label=node_label(person),
            shape="box",
            style="rounded,filled",
            fillcolor=node_color(person, node, controller.view_mode),
            fontsize="10",
            width=f"{config.frame_width / POINTS_PER_INCH:.3f}",
            height=f"{config.frame_height / POINTS_PER_INCH:.3f}",
            fixedsize="true",
            pos=f"{node.x:g},{-node.y:g}!",
        )
        if node.is_root:
            attrs["penwidth"] = "3"
        P.add_node(pydot.Node(str(node.individual_id), **attrs))

    for edge in controller.render_edges():
        if edge.kind == EdgeKind.SPOUSE:
            P.add_edge(
                pydot.Edge(
                    str(edge.source_id),
                    str(edge.target_id),
                    dir="none",
                    style="dashed",
                    color="hotpink",
                )
            )
        else:
            P.add_edge(pydot.Edge(str(edge.source_id), str(edge.target_id), color="darkgray"))

    return P


def export_layout(controller: InteractionController, output_path: Path) -> Path:
    """Render the current layout to PNG, SVG or PDF (chosen by extension) with Graphviz."""
    P = build_dot(controller)

    ext = output_path.suffix.lower().lstrip(".")
    if ext not in ("png", "svg", "pdf", "dot"):
        ext = "png"

    if ext == "dot":
        output_path.write_text(P.to_string(), encoding="utf-8")
    else:
        P.write(str(output_path), prog="neato", format=ext)
    print(f"Graph saved to {output_path}")
    return output_path


class InteractiveTreeView:
    """
    Matplotlib window that draws a controller's layout and feeds pointer events back to it.

    - click a node: "open detail" intent
    - double-click a node: re-root on it
    - drag a node: move it, only its edges follow
    - keys: ``b`` back, ``a`` ancestors, ``d`` descendants, ``m`` both
    """

    MODE_KEYS = {"a": ViewMode.ANCESTORS, "d": ViewMode.DESCENDANTS, "m": ViewMode.BOTH}

    def __init__(self, controller: InteractionController, on_intent=None):
        self.controller = controller
        self.on_intent = on_intent
        self.fig = None
        self.ax = None
        self._dragging: str | None = None
        self._drag_origin: tuple[float, float] | None = None

    def open(self):
        self.fig, self.ax = plt.subplots(figsize=(20, 16))
        canvas = self.fig.canvas
        canvas.mpl_connect("button_press_event", self.on_press)
        canvas.mpl_connect("motion_notify_event", self.on_motion)
        canvas.mpl_connect("button_release_event", self.on_release)
        canvas.mpl_connect("key_press_event", self.on_key)
        self.controller.attach_surface()
        self.redraw()
        return self.fig

    def show(self):
        self.open()
        plt.show()

    def hit_test(self, x: float, y: float) -> str | None:
        """Return the id of the topmost node whose frame contains (x, y)."""
        half_w = self.controller.config.frame_width / 2
        half_h = self.controller.config.frame_height / 2
        for node in reversed(self.controller.render_nodes()):
            if abs(node.x - x) <= half_w and abs(node.y - y) <= half_h:
                return node.individual_id
        return None

    def _emit(self, intent: NavigationIntent) -> None:
        if self.on_intent is not None:
            self.on_intent(intent)

    def _event_point(self, event) -> tuple[float, float] | None:
        if event.inaxes is not self.ax or event.xdata is None or event.ydata is None:
            return None
        return (event.xdata, event.ydata)

    def on_press(self, event):
        point = self._event_point(event)
        if point is None:
            return
        pid = self.hit_test(*point)
        if pid is None:
            return

        if getattr(event, "dblclick", False):
            self._emit(self.controller.view_individual(pid))
            self.redraw()
            return

        if self.controller.drag_start(pid, *point):
            self._dragging = pid
            self._drag_origin = point

    def on_motion(self, event):
        if self._dragging is None:
            return
        point = self._event_point(event)
        if point is None:
            return
        self.controller.drag_move(self._dragging, *point)
        self.redraw()

    def on_release(self, event):
        if self._dragging is None:
            return
        pid = self._dragging
        point = self._event_point(event) or self._drag_origin
        self._dragging = None
        self._drag_origin = None

        if self.controller.drag_end(pid, *point):
            self._emit(self.controller.on_node_click(pid))
        self.redraw()

    def on_key(self, event):
        if event.key in ("b", "backspace"):
            self.controller.return_to_previous()
        elif event.key in self.MODE_KEYS:
            self.controller.set_view_mode(self.MODE_KEYS[event.key])
        else:
            return
        self.redraw()

    def redraw(self):
        if self.ax is None:
            return
        ax = self.ax
        ax.clear()
        ax.axis("off")

        controller = self.controller
        positions = controller.positions
        radius = min(controller.config.frame_width, controller.config.frame_height) / 2

        for edge in controller.render_edges():
            sx, sy = positions[edge.source_id]
            tx, ty = positions[edge.target_id]
            if edge.kind == EdgeKind.SPOUSE:
                ax.plot([sx, tx], [sy, ty], linestyle="--", color="hotpink", linewidth=2, zorder=1)
            else:
                my = (sy + ty) / 2
                path = MplPath(
                    [(sx, sy), (sx, my), (tx, my), (tx, ty)],
                    [MplPath.MOVETO, MplPath.CURVE4, MplPath.CURVE4, MplPath.CURVE4],
                )
                ax.add_patch(PathPatch(path, fill=False, edgecolor="#cccccc", linewidth=2, zorder=1))

        for node in controller.render_nodes():
            person = controller.individual(node.individual_id)
            ax.add_patch(
                Circle(
                    (node.x, node.y),
                    radius * 0.75,
                    facecolor=node_color(person, node, controller.view_mode),
                    edgecolor="black" if node.is_root else "white",
                    linewidth=3,
                    zorder=2,
                )
            )
            ax.text(node.x, node.y, person.initials, ha="center", va="center", fontsize=10, weight="bold", zorder=3)
            ax.text(node.x, node.y + radius, person.full_name, ha="center", va="top", fontsize=8, zorder=3)
            if person.life_years:
                ax.text(node.x, node.y + radius + 14, person.life_years, ha="center", va="top", fontsize=7, color="#666666", zorder=3)

        box = bounding_box(positions, default_frame=controller.config.frame)
        if box is not None:
            min_x, min_y, max_x, max_y = box
            pad = controller.config.frame_width
            ax.set_xlim(min_x - pad, max_x + pad)
            # Layout y grows downward
            ax.set_ylim(max_y + pad, min_y - pad)
        ax.set_aspect("equal")
        self.fig.canvas.draw_idle()
