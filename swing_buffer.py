# -*- coding: utf-8 -*-
########################
# swing_buffer.py
########################
# Purpose:
# - Buffer notes per hand and decide when a run of notes forms one finished swing.
#
# Design notes:
# - Pure simulation logic.
# - Per hand state machine: empty -> accumulating -> emits and resets.
# - A group never mixes hands: each hand owns its own buffer.
# - Input must be sorted by time. Unsorted input degrades silently.
#
########################
# Interfaces:
# Public classes:
# - class SwingBuffer
#   - __init__(slider_precision: float = 59.0, max_slider_length: float = inf)
#   - process(note: NoteEvent) -> Optional[list[NoteEvent]]
#   - force_flush(hand: Hand) -> list[NoteEvent]
#   - try_flush_with_lookahead(next_note: NoteEvent) -> Optional[list[NoteEvent]]
#   - get_buffer(hand: Hand) -> list[NoteEvent]
#   - is_in_group(prev: NoteEvent, next_note: NoteEvent) -> bool
#   - clone() -> SwingBuffer
#
# Inputs:
# - NoteEvent / ChainEvent with time_ms populated.
#
# Outputs:
# - Finalized note groups for swing_data.SwingDataBuilder.
#
########################

from __future__ import annotations

import math
from typing import Dict, List, Optional

import directions
from map_models import ChainEvent, CutDirection, Hand, NoteEvent


DEFAULT_SLIDER_PRECISION_MS = 59.0


class SwingBuffer:
    def __init__(
        self,
        slider_precision: float = DEFAULT_SLIDER_PRECISION_MS,
        max_slider_length: float = math.inf,
    ) -> None:
        self._slider_precision = float(slider_precision)
        self._max_slider_length = float(max_slider_length)
        self._buffers: Dict[Hand, List[NoteEvent]] = {Hand.LEFT: [], Hand.RIGHT: []}

    def slider_precision(self) -> float:
        return float(self._slider_precision)

    def max_slider_length(self) -> float:
        return float(self._max_slider_length)

    def clone(self) -> "SwingBuffer":
        clone = SwingBuffer(self._slider_precision, self._max_slider_length)
        clone._buffers = {hand: list(notes) for hand, notes in self._buffers.items()}
        return clone

    def get_buffer(self, hand: Hand) -> List[NoteEvent]:
        return list(self._buffers[Hand(hand)])

    def _is_within_max_length(self, buffer: List[NoteEvent], note: NoteEvent) -> bool:
        if not buffer:
            return True
        earliest_ms = min(float(item.time_ms) for item in buffer)
        return abs(float(note.time_ms) - earliest_ms) <= self._max_slider_length

    def process(self, note: NoteEvent) -> Optional[List[NoteEvent]]:
        """Append a note, returning the previous group when this note starts a new swing."""
        buffer = self._buffers[Hand(note.hand)]

        if not buffer or (self._is_within_max_length(buffer, note) and self.is_in_group(buffer[-1], note)):
            buffer.append(note)
            return None

        finalized = list(buffer)
        buffer.clear()
        buffer.append(note)
        return finalized

    def force_flush(self, hand: Hand) -> List[NoteEvent]:
        buffer = self._buffers[Hand(hand)]
        if not buffer:
            return []
        result = list(buffer)
        buffer.clear()
        return result

    def try_flush_with_lookahead(self, next_note: NoteEvent) -> Optional[List[NoteEvent]]:
        """Flush the hand's buffer early when next_note cannot continue it. next_note is not buffered."""
        buffer = self._buffers[Hand(next_note.hand)]
        if not buffer:
            return None

        if not self.is_in_group(buffer[-1], next_note) or not self._is_within_max_length(buffer, next_note):
            finalized = list(buffer)
            buffer.clear()
            return finalized
        return None

    def is_in_group(self, prev: NoteEvent, next_note: NoteEvent) -> bool:
        prev_end_ms = float(prev.tail_time_ms) if isinstance(prev, ChainEvent) else float(prev.time_ms)
        delta = float(next_note.time_ms) - prev_end_ms
        if delta > self._slider_precision:
            return False
        return (
            prev.direction == CutDirection.ANY
            or next_note.direction == CutDirection.ANY
            or prev.direction == next_note.direction
            or directions.is_within_intervals(prev.direction, next_note.direction, 1)
        )


def _run_unit_tests() -> None:
    def note(time_ms: float, direction: CutDirection, hand: Hand = Hand.RIGHT) -> NoteEvent:
        return NoteEvent(beat=time_ms / 500.0, x=1, y=0, hand=hand, direction=direction, time_ms=time_ms)

    buffer = SwingBuffer()
    assert buffer.process(note(0.0, CutDirection.DOWN)) is None
    assert buffer.process(note(40.0, CutDirection.DOWN_LEFT)) is None
    # Left hand notes never touch the right buffer.
    assert buffer.process(note(50.0, CutDirection.UP, hand=Hand.LEFT)) is None

    group = buffer.process(note(500.0, CutDirection.UP))
    assert group is not None and [item.time_ms for item in group] == [0.0, 40.0]
    assert [item.time_ms for item in buffer.force_flush(Hand.RIGHT)] == [500.0]
    assert buffer.force_flush(Hand.RIGHT) == []

    limited = SwingBuffer(max_slider_length=50.0)
    limited.process(note(0.0, CutDirection.DOWN))
    limited.process(note(40.0, CutDirection.DOWN))
    assert limited.process(note(80.0, CutDirection.DOWN)) is not None


if __name__ == "__main__":
    _run_unit_tests()
    print("swing_buffer.py: ok")
