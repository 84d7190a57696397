# -*- coding: utf-8 -*-
########################
# wall_buffer.py
########################
# Purpose:
# - Track currently active obstacles (walls) and derive which grid cells are safe for the head.
# - Hold the beat stamps of the last dodge (column change) and duck (row change) influence.
#
# Design notes:
# - Pure simulation logic.
# - Blocked cells are never cached. Every query recomputes them from non-expired walls.
# - A wall that starts after the queried beat does not block yet.
# - A wall footprint is clamped to the 4x3 grid and extended one row downward for head clearance.
#
########################
# Interfaces:
# Public constants:
# - GRID_COLUMNS = 4, GRID_ROWS = 3, WALL_EXPIRY_OFFSET = 0.2 (beats)
#
# Public classes:
# - class WallBuffer
#   - process(wall: ObstacleEvent) -> None
#   - batch_process(walls: Iterable[ObstacleEvent]) -> None
#   - remove_expired(current_beat: float) -> None
#   - is_blocked(x: int, y: int, current_beat: Optional[float] = None) -> bool
#   - blocking_walls(x: int, y: int, current_beat: Optional[float] = None) -> list[ObstacleEvent]
#   - get_available_grid_spaces(current_beat: float) -> list[tuple[int, int]]
#   - active_walls() -> list[ObstacleEvent]
#   - clone() -> WallBuffer
#
########################

from __future__ import annotations

import math
from typing import Iterable, List, Optional, Tuple

from map_models import ObstacleEvent


GRID_COLUMNS = 4
GRID_ROWS = 3
WALL_EXPIRY_OFFSET = 0.2

GridCell = Tuple[int, int]


def _footprint(wall: ObstacleEvent) -> Tuple[int, int, int, int]:
    start_x = max(0, int(wall.x))
    end_x = min(GRID_COLUMNS - 1, int(wall.x) + int(wall.width) - 1)
    start_y = max(0, int(wall.y) - 1)
    end_y = min(GRID_ROWS - 1, int(wall.y) + int(wall.height) - 1)
    return start_x, end_x, start_y, end_y


class WallBuffer:
    def __init__(self) -> None:
        self._active_walls: List[ObstacleEvent] = []
        self.last_dodge_influence: float = -math.inf
        self.last_duck_influence: float = -math.inf

    def active_walls(self) -> List[ObstacleEvent]:
        return list(self._active_walls)

    def process(self, wall: ObstacleEvent) -> None:
        if wall not in self._active_walls:
            self._active_walls.append(wall)

    def batch_process(self, walls: Iterable[ObstacleEvent]) -> None:
        for wall in walls:
            self.process(wall)

    def remove_expired(self, current_beat: float) -> None:
        current = float(current_beat)
        self._active_walls = [
            wall
            for wall in self._active_walls
            if not (float(wall.beat) + float(wall.duration) + WALL_EXPIRY_OFFSET < current)
        ]

    def blocking_walls(self, x: int, y: int, current_beat: Optional[float] = None) -> List[ObstacleEvent]:
        blocking: List[ObstacleEvent] = []
        for wall in self._active_walls:
            if current_beat is not None and float(wall.beat) > float(current_beat):
                continue
            start_x, end_x, start_y, end_y = _footprint(wall)
            if start_x <= int(x) <= end_x and start_y <= int(y) <= end_y:
                blocking.append(wall)
        return blocking

    def is_blocked(self, x: int, y: int, current_beat: Optional[float] = None) -> bool:
        return bool(self.blocking_walls(x, y, current_beat))

    def get_available_grid_spaces(self, current_beat: float) -> List[GridCell]:
        self.remove_expired(current_beat)
        available: List[GridCell] = []
        for x in range(GRID_COLUMNS):
            for y in range(GRID_ROWS):
                if not self.is_blocked(x, y, current_beat):
                    available.append((x, y))
        return available

    def clone(self) -> "WallBuffer":
        clone = WallBuffer()
        clone._active_walls = list(self._active_walls)
        clone.last_dodge_influence = self.last_dodge_influence
        clone.last_duck_influence = self.last_duck_influence
        return clone


def _run_unit_tests() -> None:
    buffer = WallBuffer()
    wall = ObstacleEvent(beat=0.0, x=1, y=0, width=2, height=5, duration=1.0)
    buffer.process(wall)
    buffer.process(wall)
    assert len(buffer.active_walls()) == 1

    available = buffer.get_available_grid_spaces(0.5)
    assert (1, 1) not in available and (2, 2) not in available
    assert (0, 0) in available and (3, 2) in available

    assert (1, 1) not in buffer.get_available_grid_spaces(1.15)
    assert (1, 1) in buffer.get_available_grid_spaces(1.25)

    upcoming = WallBuffer()
    upcoming.process(ObstacleEvent(beat=2.0, x=1, y=0, width=2, height=5, duration=1.0))
    assert (1, 1) in upcoming.get_available_grid_spaces(1.0)
    assert (1, 1) not in upcoming.get_available_grid_spaces(2.0)

    overhead = WallBuffer()
    overhead.process(ObstacleEvent(beat=0.0, x=0, y=2, width=4, height=1, duration=2.0))
    cells = overhead.get_available_grid_spaces(1.0)
    assert all(y == 0 for _x, y in cells) and len(cells) == GRID_COLUMNS


if __name__ == "__main__":
    _run_unit_tests()
    print("wall_buffer.py: ok")
