from __future__ import annotations

import random

import pygame
import pytest

import snake
from snake_core import DOWN, LEFT, UP, GameConfig, GameSession


CELL = 16


@pytest.fixture
def session() -> GameSession:
    return GameSession(GameConfig(12, 12), rng=random.Random(0), body=[(0, 0), (0, 1), (0, 2)], food=(5, 5))


def test_tile_rect_flips_y_axis() -> None:
    assert snake.tile_rect((0, 0), 12, 32) == pygame.Rect(0, 352, 32, 32)
    assert snake.tile_rect((3, 11), 12, 32) == pygame.Rect(96, 0, 32, 32)


def test_arrow_keys_turn_the_snake(session: GameSession) -> None:
    assert snake.handle_key(session, pygame.K_DOWN) is True
    assert session.heading == UP
    assert snake.handle_key(session, pygame.K_LEFT) is True
    assert session.heading == LEFT
    assert snake.handle_key(session, pygame.K_DOWN) is True
    assert session.heading == DOWN


def test_other_keys_are_ignored(session: GameSession) -> None:
    assert snake.handle_key(session, pygame.K_SPACE) is True
    assert session.heading == UP


@pytest.mark.parametrize("key", [pygame.K_ESCAPE, pygame.K_q])
def test_quit_keys(session: GameSession, key: int) -> None:
    assert snake.handle_key(session, key) is False


def test_draw_board(session: GameSession) -> None:
    surface = pygame.Surface((12 * CELL, 12 * CELL))
    snake.draw_board(surface, session, CELL)

    food = snake.tile_rect((5, 5), 12, CELL)
    assert surface.get_at(food.center) == snake.TILE_COLORS[snake.FOOD]
    body = snake.tile_rect((0, 1), 12, CELL)
    assert surface.get_at(body.center) == snake.TILE_COLORS[snake.BODY]
    head = snake.tile_rect((0, 2), 12, CELL)
    assert surface.get_at((head.x + 2, head.y + 2)) == snake.TILE_COLORS[snake.HEAD_UP]
    empty = snake.tile_rect((8, 8), 12, CELL)
    assert surface.get_at(empty.center) == snake.TILE_COLORS[snake.EMPTY]


def test_draw_changes_clears_vacated_tail(session: GameSession) -> None:
    surface = pygame.Surface((12 * CELL, 12 * CELL))
    snake.draw_board(surface, session, CELL)
    result = session.step()
    snake.draw_changes(surface, result.changes, 12, CELL)

    tail = snake.tile_rect((0, 0), 12, CELL)
    assert surface.get_at(tail.center) == snake.TILE_COLORS[snake.EMPTY]
    new_head = snake.tile_rect((0, 3), 12, CELL)
    assert surface.get_at((new_head.x + 2, new_head.y + 2)) == snake.TILE_COLORS[snake.HEAD_UP]
