"""
1) Load the individuals and relationships of one tree from a JSON export.
2) Build the networkx graph, dropping relationships to unknown individuals.
3) Validate the data for cycles, impossible ages, and date ordering.
4) Pick a perspective (or use the one given) and build the hierarchy.
5) Lay out the hierarchy, resolve collisions, and build the edges.
6) Export the layout with Graphviz, or open the interactive view.
"""

import argparse
import json
import logging
from pathlib import Path
import sys

from interaction import InteractionController, RebuildStatus
from layout import LayoutConfig
from models import ViewMode
from parsing import load_graph_json
from validation import validate_graph


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Lay out a family tree around a perspective person.")
    parser.add_argument("input_json", type=Path, help="Path to the tree JSON export.")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write the layout to this file (.png, .svg, .pdf, .dot or .json).",
    )
    parser.add_argument("-p", "--perspective", default=None, help="Individual id to root the view on.")
    parser.add_argument(
        "-m",
        "--mode",
        choices=[m.value for m in ViewMode],
        default=ViewMode.BOTH.value,
        help="Which relatives to show (default: both).",
    )
    parser.add_argument(
        "-g", "--generations", type=int, default=None, help="Limit the number of generations."
    )
    parser.add_argument("-i", "--interactive", action="store_true", help="Open the interactive view.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def layout_payload(controller: InteractionController) -> dict:
    """Render-ready node and edge lists as plain JSON-compatible data."""
    return {
        "status": controller.status.value,
        "perspective": controller.perspective.individual_id,
        "root": controller.root.id if controller.root else None,
        "mode": controller.view_mode.value,
        "nodes": [
            {
                "individualId": n.individual_id,
                "x": round(n.x, 2),
                "y": round(n.y, 2),
                "isRoot": n.is_root,
                "spouseOf": n.spouse_of,
            }
            for n in controller.render_nodes()
        ],
        "edges": [
            {"sourceId": e.source_id, "targetId": e.target_id, "kind": e.kind.value, "path": e.path}
            for e in controller.render_edges()
        ],
    }


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # 1) Load
    try:
        doc = load_graph_json(args.input_json)
        config = LayoutConfig.from_mapping(doc.layout)
    except (OSError, ValueError, TypeError) as e:
        print(f"Could not load {args.input_json}: {e}", file=sys.stderr)
        return 1
    print(f"Loaded {len(doc.individuals)} individuals and {len(doc.relationships)} relationships")

    # 2-5) Graph, hierarchy, layout
    perspective = args.perspective or doc.perspective_id
    try:
        controller = InteractionController(
            doc.individuals,
            doc.relationships,
            perspective_id=perspective,
            view_mode=ViewMode(args.mode),
            config=config,
            max_generations=args.generations,
            surface_ready=not args.interactive,
        )
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2

    # 3) Validate
    for warning in validate_graph(controller.G):
        print(f"Warning: {warning}")

    # 6) Output
    if args.interactive:
        from plotting import InteractiveTreeView

        view = InteractiveTreeView(controller, on_intent=lambda intent: print(intent))
        view.show()
        return 0

    if controller.status == RebuildStatus.EMPTY_GRAPH:
        print("No individuals in this tree yet; nothing to draw.")
        return 0

    print(
        f"Root: {controller.root.full_name} ({controller.view_mode.value} view, "
        f"{len(controller.positions)} nodes, {len(controller.edges)} edges)"
    )

    if args.output is None:
        print(json.dumps(layout_payload(controller), indent=2))
    elif args.output.suffix.lower() == ".json":
        args.output.write_text(json.dumps(layout_payload(controller), indent=2), encoding="utf-8")
        print(f"Layout saved to {args.output}")
    else:
        from plotting import export_layout

        export_layout(controller, args.output)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
