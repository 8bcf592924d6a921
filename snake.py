from __future__ import annotations

import argparse
import logging
import random
from typing import Iterable, Tuple

import pygame

from snake_core import (
    BODY,
    DOWN,
    EMPTY,
    FOOD,
    GRID_HEIGHT,
    GRID_WIDTH,
    HEAD_DOWN,
    HEAD_LEFT,
    HEAD_RIGHT,
    HEAD_UP,
    LEFT,
    RIGHT,
    RUNNING,
    TICK_PERIOD,
    UP,
    GameConfig,
    GameSession,
    Position,
)


logger = logging.getLogger(__name__)

TILE_SIZE = 16
TILE_SCALE = 2
FRAME_RATE = 60


KEY_HEADINGS = {
    pygame.K_UP: UP,
    pygame.K_DOWN: DOWN,
    pygame.K_LEFT: LEFT,
    pygame.K_RIGHT: RIGHT,
}

TILE_COLORS = {
    EMPTY: pygame.Color(24, 24, 24),
    FOOD: pygame.Color("red"),
    BODY: pygame.Color("green3"),
    HEAD_UP: pygame.Color("lime"),
    HEAD_DOWN: pygame.Color("lime"),
    HEAD_LEFT: pygame.Color("lime"),
    HEAD_RIGHT: pygame.Color("lime"),
}

# Unit-square triangles pointing the way the head faces, in screen space (y down).
HEAD_ARROWS = {
    HEAD_UP: ((0.5, 0.2), (0.2, 0.7), (0.8, 0.7)),
    HEAD_DOWN: ((0.5, 0.8), (0.2, 0.3), (0.8, 0.3)),
    HEAD_LEFT: ((0.2, 0.5), (0.7, 0.2), (0.7, 0.8)),
    HEAD_RIGHT: ((0.8, 0.5), (0.3, 0.2), (0.3, 0.8)),
}


def tile_rect(position: Position, grid_height: int, cell_size: int) -> pygame.Rect:
    # Grid y grows upward, screen y grows downward.
    x, y = position
    return pygame.Rect(x * cell_size, (grid_height - 1 - y) * cell_size, cell_size, cell_size)


def draw_tile(surface: pygame.Surface, position: Position, category: int, grid_height: int, cell_size: int) -> None:
    rect = tile_rect(position, grid_height, cell_size)
    pygame.draw.rect(surface, TILE_COLORS[EMPTY], rect)
    if category == EMPTY:
        return
    color = TILE_COLORS[category]
    if category == FOOD:
        radius = max(2, cell_size // 2 - 4)
        pygame.draw.circle(surface, color, rect.center, radius)
    elif category == BODY:
        radius = max(2, cell_size // 2 - 2)
        pygame.draw.circle(surface, color, rect.center, radius)
    else:
        pygame.draw.rect(surface, color, rect.inflate(-2, -2))
        points = [(rect.x + px * cell_size, rect.y + py * cell_size) for px, py in HEAD_ARROWS[category]]
        pygame.draw.polygon(surface, TILE_COLORS[EMPTY], points)


def draw_changes(
    surface: pygame.Surface, changes: Iterable[Tuple[Position, int]], grid_height: int, cell_size: int
) -> None:
    for position, category in changes:
        draw_tile(surface, position, category, grid_height, cell_size)


def draw_board(surface: pygame.Surface, session: GameSession, cell_size: int) -> None:
    tiles = session.tiles()
    height, width = tiles.shape
    for y in range(height):
        for x in range(width):
            draw_tile(surface, (x, y), int(tiles[y, x]), height, cell_size)


def handle_key(session: GameSession, key: int) -> bool:
    """Feed one key edge to the session. Returns False when the key asks to quit."""
    if key in (pygame.K_ESCAPE, pygame.K_q):
        return False
    heading = KEY_HEADINGS.get(key)
    if heading is not None:
        session.press(heading)
    return True


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play Snake on a fixed grid.")
    parser.add_argument("--width", type=int, default=GRID_WIDTH, help="Grid width in cells.")
    parser.add_argument("--height", type=int, default=GRID_HEIGHT, help="Grid height in cells.")
    parser.add_argument("--period", type=float, default=TICK_PERIOD, help="Seconds between snake moves.")
    parser.add_argument("--scale", type=int, default=TILE_SCALE, help="Pixel scale applied to each tile.")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for food placement.")
    parser.add_argument("--log-level", type=str, default="INFO", help="Logging level.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    config = GameConfig(args.width, args.height, args.period)
    session = GameSession(config, rng=random.Random(args.seed))
    cell_size = TILE_SIZE * max(1, args.scale)

    pygame.init()
    screen = pygame.display.set_mode((config.width * cell_size, config.height * cell_size))
    pygame.display.set_caption("Snake")
    clock = pygame.time.Clock()
    draw_board(screen, session, cell_size)

    running = True
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                running = handle_key(session, event.key) and running

        elapsed = clock.tick(FRAME_RATE) / 1000.0
        result = session.update(elapsed)
        if result is not None:
            draw_changes(screen, result.changes, config.height, cell_size)
            if result.ate:
                pygame.display.set_caption(f"Snake - {session.score}")
            if result.status != RUNNING:
                logger.info("Session %s; close the window or press Esc to quit", result.status)

        pygame.display.flip()

    pygame.quit()


if __name__ == "__main__":
    main()
