from __future__ import annotations

import logging
import random
from collections import deque
from typing import Deque, Iterable, List, Optional, Tuple

import numpy as np


logger = logging.getLogger(__name__)

GRID_WIDTH = 12
GRID_HEIGHT = 12
TICK_PERIOD = 0.4  # seconds between snake moves
FOOD_SAMPLE_ATTEMPTS = 64

Position = Tuple[int, int]
Heading = Tuple[int, int]

# y grows upward, so (0, 0) is the bottom-left cell.
UP: Heading = (0, 1)
DOWN: Heading = (0, -1)
LEFT: Heading = (-1, 0)
RIGHT: Heading = (1, 0)
HEADINGS: Tuple[Heading, ...] = (UP, DOWN, LEFT, RIGHT)
HEADING_NAMES = {UP: "up", DOWN: "down", LEFT: "left", RIGHT: "right"}

# Tile categories handed to the presentation layer.
EMPTY = 0
FOOD = 1
BODY = 2
HEAD_UP = 3
HEAD_DOWN = 4
HEAD_LEFT = 5
HEAD_RIGHT = 6
HEAD_TILES = {UP: HEAD_UP, DOWN: HEAD_DOWN, LEFT: HEAD_LEFT, RIGHT: HEAD_RIGHT}

RUNNING = "running"
BLOCKED = "blocked"
FILLED = "filled"

START_BODY: Tuple[Position, ...] = ((0, 0), (0, 1), (0, 2))
START_HEADING: Heading = UP


class GameConfig:
    """Session parameters, fixed for the lifetime of a session."""

    def __init__(self, width: int = GRID_WIDTH, height: int = GRID_HEIGHT, period: float = TICK_PERIOD):
        if width <= 0 or height <= 0:
            raise ValueError(f"grid must be at least 1x1, got {width}x{height}")
        if width * height < 2:
            raise ValueError("grid needs room for a snake of length 2")
        if period <= 0:
            raise ValueError(f"tick period must be positive, got {period}")
        self.width = int(width)
        self.height = int(height)
        self.period = float(period)

    @property
    def bounds(self) -> Tuple[int, int]:
        return self.width, self.height

    def __repr__(self) -> str:
        return f"GameConfig(width={self.width}, height={self.height}, period={self.period})"


class Snake:
    """Ordered body cells, tail first and head last, plus the current heading."""

    def __init__(self, body: Iterable[Position], heading: Heading = START_HEADING):
        self.body: Deque[Position] = deque(tuple(cell) for cell in body)
        if len(self.body) < 2:
            raise ValueError("snake needs at least two segments")
        if len(set(self.body)) != len(self.body):
            raise ValueError("snake body overlaps itself")
        for prev, cur in zip(self.body, list(self.body)[1:]):
            if abs(prev[0] - cur[0]) + abs(prev[1] - cur[1]) != 1:
                raise ValueError(f"snake segments {prev} and {cur} are not adjacent")
        if heading not in HEADINGS:
            raise ValueError(f"unknown heading: {heading!r}")
        self.heading = heading

    def __len__(self) -> int:
        return len(self.body)

    def head(self) -> Position:
        # The constructor guarantees a non-empty body, so this only fails on a bug.
        return self.body[-1]

    def candidate_head(self, heading: Heading | None = None) -> Position:
        dx, dy = heading if heading is not None else self.heading
        x, y = self.head()
        return x + dx, y + dy

    def advance(self, new_head: Position, grew: bool) -> None:
        if not grew:
            self.body.popleft()
        self.body.append(new_head)


def in_bounds(pos: Position, bounds: Tuple[int, int]) -> bool:
    width, height = bounds
    return 0 <= pos[0] < width and 0 <= pos[1] < height


def is_blocked(candidate: Position, body: Iterable[Position], bounds: Tuple[int, int]) -> bool:
    # Checked before the move, so the tail cell still counts even though it would vacate.
    if not in_bounds(candidate, bounds):
        return True
    return candidate in body


def occupancy_mask(occupied: Iterable[Position], bounds: Tuple[int, int]) -> np.ndarray:
    width, height = bounds
    mask = np.zeros((height, width), dtype=bool)
    for x, y in occupied:
        mask[y, x] = True
    return mask


def place_food(
    occupied: Iterable[Position], bounds: Tuple[int, int], rng: random.Random | None = None
) -> Optional[Position]:
    """Pick a free cell uniformly at random, or None when every cell is taken.

    A few rejection samples are tried first; past that the free cells are
    listed explicitly so a crowded board still terminates.
    """
    rng = rng or random.Random()
    width, height = bounds
    occupied = set(occupied)
    if len(occupied) >= width * height:
        return None

    for _ in range(FOOD_SAMPLE_ATTEMPTS):
        cell = (rng.randrange(width), rng.randrange(height))
        if cell not in occupied:
            return cell

    free = np.flatnonzero(~occupancy_mask(occupied, bounds))
    index = int(free[rng.randrange(len(free))])
    y, x = divmod(index, width)
    return x, y


def apply_turn(current: Heading, pressed: Heading | None) -> Heading:
    # Only perpendicular turns: a vertical heading accepts left/right, a horizontal one up/down.
    if pressed is None:
        return current
    if current in (UP, DOWN) and pressed in (LEFT, RIGHT):
        return pressed
    if current in (LEFT, RIGHT) and pressed in (UP, DOWN):
        return pressed
    return current


class GameClock:
    """Fixed-period accumulator that fires at most once per check."""

    def __init__(self, period: float = TICK_PERIOD):
        if period <= 0:
            raise ValueError(f"tick period must be positive, got {period}")
        self.period = period
        self.elapsed = 0.0

    def advance(self, delta: float) -> bool:
        self.elapsed += max(0.0, delta)
        if self.elapsed < self.period:
            return False
        # Whole periods beyond the first are dropped rather than replayed.
        self.elapsed %= self.period
        return True

    def reset(self) -> None:
        self.elapsed = 0.0


def encode_tiles(
    body: Iterable[Position], food: Position | None, heading: Heading, bounds: Tuple[int, int]
) -> np.ndarray:
    width, height = bounds
    tiles = np.full((height, width), EMPTY, dtype=np.int8)
    if food is not None:
        tiles[food[1], food[0]] = FOOD
    cells = list(body)
    for x, y in cells[:-1]:
        tiles[y, x] = BODY
    if cells:
        head_x, head_y = cells[-1]
        tiles[head_y, head_x] = HEAD_TILES[heading]
    return tiles


def tile_changes(before: np.ndarray, after: np.ndarray) -> List[Tuple[Position, int]]:
    if before.shape != after.shape:
        raise ValueError(f"tile maps differ in shape: {before.shape} vs {after.shape}")
    return [((int(x), int(y)), int(after[y, x])) for y, x in np.argwhere(before != after)]


class TickResult:
    """Outcome of one tick: the session status, whether food was eaten, and the changed tiles."""

    def __init__(self, status: str, ate: bool = False, changes: List[Tuple[Position, int]] | None = None):
        self.status = status
        self.ate = ate
        self.changes = changes or []

    def __repr__(self) -> str:
        return f"TickResult(status={self.status!r}, ate={self.ate}, changes={len(self.changes)})"


class GameSession:
    """One game: grid bounds, snake, food, clock and status, with no shared state."""

    def __init__(
        self,
        config: GameConfig | None = None,
        rng: random.Random | None = None,
        body: Iterable[Position] | None = None,
        heading: Heading = START_HEADING,
        food: Position | None = None,
    ):
        self.config = config or GameConfig()
        self.rng = rng or random.Random()
        self.snake = Snake(START_BODY if body is None else body, heading)
        bounds = self.config.bounds
        for cell in self.snake.body:
            if not in_bounds(cell, bounds):
                raise ValueError(f"snake segment {cell} is outside a {bounds[0]}x{bounds[1]} grid")
        if food is not None:
            food = tuple(food)
            if not in_bounds(food, bounds) or food in self.snake.body:
                raise ValueError(f"food at {food} must be a free cell inside the grid")
            self.food: Position | None = food
        else:
            self.food = place_food(self.snake.body, bounds, self.rng)
        self.clock = GameClock(self.config.period)
        self.facing = self.snake.heading
        self.status = RUNNING if self.food is not None else FILLED
        self.score = 0
        self.ticks = 0
        logger.info(
            "Session started on %dx%d grid, snake %s heading %s, food at %s",
            self.config.width,
            self.config.height,
            list(self.snake.body),
            HEADING_NAMES[self.snake.heading],
            self.food,
        )

    @property
    def heading(self) -> Heading:
        return self.snake.heading

    def occupied(self) -> set:
        cells = set(self.snake.body)
        if self.food is not None:
            cells.add(self.food)
        return cells

    def tiles(self) -> np.ndarray:
        # The head tile faces the last committed move, not a pending turn.
        return encode_tiles(self.snake.body, self.food, self.facing, self.config.bounds)

    def press(self, key: Heading | None) -> Heading:
        self.snake.heading = apply_turn(self.snake.heading, key)
        return self.snake.heading

    def update(self, elapsed: float) -> TickResult | None:
        if self.status != RUNNING:
            return None
        if not self.clock.advance(elapsed):
            return None
        return self.step()

    def step(self) -> TickResult:
        if self.status != RUNNING:
            return TickResult(self.status)

        bounds = self.config.bounds
        candidate = self.snake.candidate_head()
        if is_blocked(candidate, self.snake.body, bounds):
            self.status = BLOCKED
            reason = "wall" if not in_bounds(candidate, bounds) else "self"
            logger.info(
                "Snake blocked by %s at %s after %d ticks, score %d", reason, candidate, self.ticks, self.score
            )
            return TickResult(self.status)

        before = self.tiles()
        ate = candidate == self.food
        self.snake.advance(candidate, grew=ate)
        self.facing = self.snake.heading
        if ate:
            self.score += 1
            self.food = place_food(self.snake.body, bounds, self.rng)
            logger.info("Food eaten at %s, length %d, next food at %s", candidate, len(self.snake), self.food)
            if self.food is None:
                self.status = FILLED
                logger.info("Board filled after %d ticks, score %d", self.ticks + 1, self.score)
        self.ticks += 1
        changes = tile_changes(before, self.tiles())
        logger.debug("Tick %d: head %s, %d tiles changed", self.ticks, candidate, len(changes))
        return TickResult(self.status, ate, changes)
