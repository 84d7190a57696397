from __future__ import annotations

from typing import Callable

import pytest

from map_models import CutDirection, Hand, NoteEvent


NoteFactory = Callable[..., NoteEvent]


@pytest.fixture
def make_note() -> NoteFactory:
    """Notes on a 120 BPM grid: one beat is 500 ms unless time_ms is given."""

    def factory(
        beat: float,
        direction: CutDirection = CutDirection.DOWN,
        *,
        x: int = 1,
        y: int = 0,
        hand: Hand = Hand.RIGHT,
        time_ms: float | None = None,
    ) -> NoteEvent:
        resolved_ms = beat * 500.0 if time_ms is None else time_ms
        return NoteEvent(beat=beat, x=x, y=y, hand=hand, direction=direction, time_ms=resolved_ms)

    return factory
