"""Iterative pairwise separation of overlapping node frames."""

from dataclasses import dataclass, field
import itertools
import logging

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 5

# Float tolerance so that pairs separated exactly to the gap are not re-flagged
_EPSILON = 1e-6


@dataclass
class CollisionReport:
    # Collisions found in each iteration that ran
    counts: list[int] = field(default_factory=list)
    # True when the final pass left more collisions than an earlier state, which was put back
    restored: bool = False

    @property
    def iterations(self) -> int:
        return len(self.counts)

    @property
    def converged(self) -> bool:
        return not self.counts or self.counts[-1] == 0


def _overlap(a, b, frame_a, frame_b, min_gap: float) -> tuple[float, float, float, float] | None:
    """Return (dx, dy, x correction, y correction) when the two frames collide, else None."""
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    need_x = (frame_a[0] + frame_b[0]) / 2 + min_gap
    need_y = (frame_a[1] + frame_b[1]) / 2 + min_gap
    if abs(dx) < need_x - _EPSILON and abs(dy) < need_y - _EPSILON:
        return dx, dy, need_x - abs(dx), need_y - abs(dy)
    return None


def find_collisions(
    positions: dict[str, tuple[float, float]],
    frames: dict[str, tuple[float, float]] | None = None,
    default_frame: tuple[float, float] = (80.0, 80.0),
    min_gap: float = 10.0,
) -> list[tuple[str, str]]:
    """Return every colliding pair of node ids, in position-store order."""
    frames = frames or {}
    return [
        (a, b)
        for a, b in itertools.combinations(list(positions), 2)
        if _overlap(
            positions[a],
            positions[b],
            frames.get(a, default_frame),
            frames.get(b, default_frame),
            min_gap,
        )
        is not None
    ]


def count_collisions(positions, frames=None, default_frame=(80.0, 80.0), min_gap=10.0) -> int:
    return len(find_collisions(positions, frames, default_frame, min_gap))


def resolve_collisions(
    positions: dict[str, tuple[float, float]],
    frames: dict[str, tuple[float, float]] | None = None,
    default_frame: tuple[float, float] = (80.0, 80.0),
    min_gap: float = 10.0,
    max_iterations: int = MAX_ITERATIONS,
) -> CollisionReport:
    """
    Nudge overlapping frames apart, mutating `positions` in place.

    Each colliding pair is separated along the axis needing the smaller correction, each
    node moving half the distance in opposite directions. Stops after an iteration with no
    collisions or after `max_iterations`. This is a best-effort relaxation: moving one
    pair apart can push a node into a third one, so convergence is not guaranteed. When
    the passes run out, the positions with the fewest collisions seen so far are kept, so
    the result never has more collisions than the input.

    Args:
        positions: Position store, keyed by individual id
        frames: Frame (width, height) per id; ids not listed use `default_frame`
        default_frame: Frame size for ids missing from `frames`
        min_gap: Extra clearance required between two frames
        max_iterations: Upper bound on relaxation passes

    Returns:
        CollisionReport with the collision count of every iteration that ran
    """
    frames = frames or {}
    report = CollisionReport()
    ids = list(positions)

    best = dict(positions)
    best_count: int | None = None
    remaining = 0

    for iteration in range(max_iterations):
        count = 0
        for a, b in itertools.combinations(ids, 2):
            hit = _overlap(
                positions[a],
                positions[b],
                frames.get(a, default_frame),
                frames.get(b, default_frame),
                min_gap,
            )
            if hit is None:
                continue
            count += 1
            dx, dy, correct_x, correct_y = hit
            (ax, ay), (bx, by) = positions[a], positions[b]
            if correct_x <= correct_y:
                step = correct_x / 2 if dx >= 0 else -correct_x / 2
                positions[a] = (ax - step, ay)
                positions[b] = (bx + step, by)
            else:
                step = correct_y / 2 if dy >= 0 else -correct_y / 2
                positions[a] = (ax, ay - step)
                positions[b] = (bx, by + step)

        report.counts.append(count)
        logger.debug("Collision pass %d: %d collisions", iteration + 1, count)
        if count == 0:
            break

        if best_count is None:
            best_count = count_collisions(best, frames, default_frame, min_gap)
        remaining = count_collisions(positions, frames, default_frame, min_gap)
        if remaining < best_count:
            best, best_count = dict(positions), remaining
    else:
        if best_count is not None and remaining > best_count:
            logger.debug("Keeping earlier positions with %d collisions instead of %d", best_count, remaining)
            for pid, point in best.items():
                positions[pid] = point
            report.restored = True

    return report
