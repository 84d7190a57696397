# -*- coding: utf-8 -*-
########################
# bomb_buffer.py
########################
# Purpose:
# - Track bombs seen by the simulation so parity checks can ask which bombs lie between two swings.
#
# Design notes:
# - Pure simulation logic.
# - The parity assessor does not consult this buffer yet. It is an extension point, kept wired into
#   the orchestrator so the data is available when bomb resets are implemented.
#
########################
# Interfaces:
# Public classes:
# - class BombBuffer
#   - process(bomb: BombEvent) -> None
#   - get_relevant_bombs(next_swing_ms: float, last_swing_ms: float) -> list[BombEvent]
#   - active_bombs() -> list[BombEvent]
#   - clone() -> BombBuffer
#
########################

from __future__ import annotations

from typing import List

from map_models import BombEvent


class BombBuffer:
    def __init__(self) -> None:
        self._active_bombs: List[BombEvent] = []

    def active_bombs(self) -> List[BombEvent]:
        return list(self._active_bombs)

    def process(self, bomb: BombEvent) -> None:
        if bomb not in self._active_bombs:
            self._active_bombs.append(bomb)

    def get_relevant_bombs(self, next_swing_ms: float, last_swing_ms: float) -> List[BombEvent]:
        """All bombs between the last swing and the next swing, ordered by time."""
        lower = float(last_swing_ms)
        upper = float(next_swing_ms)
        relevant = [bomb for bomb in self._active_bombs if lower <= float(bomb.time_ms) <= upper]
        relevant.sort(key=lambda bomb: float(bomb.time_ms))
        return relevant

    def clone(self) -> "BombBuffer":
        clone = BombBuffer()
        clone._active_bombs = list(self._active_bombs)
        return clone


def _run_unit_tests() -> None:
    buffer = BombBuffer()
    late = BombEvent(beat=2.0, x=1, y=0, time_ms=1000.0)
    early = BombEvent(beat=1.0, x=2, y=1, time_ms=500.0)
    buffer.process(late)
    buffer.process(early)
    buffer.process(late)
    assert len(buffer.active_bombs()) == 2

    assert buffer.get_relevant_bombs(1000.0, 500.0) == [early, late]
    assert buffer.get_relevant_bombs(900.0, 600.0) == []

    clone = buffer.clone()
    clone.process(BombEvent(beat=3.0, x=0, y=0, time_ms=1500.0))
    assert len(buffer.active_bombs()) == 2 and len(clone.active_bombs()) == 3


if __name__ == "__main__":
    _run_unit_tests()
    print("bomb_buffer.py: ok")
