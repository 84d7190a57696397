# -*- coding: utf-8 -*-
########################
# swing_classifier.py
########################
# Purpose:
# - Classify a finalized note group into a SwingType.
#
# Design notes:
# - Pure function of the note group. Order of checks is the contract:
#   empty -> chain -> single -> stack -> window -> dot spam -> slider.
# - Stack and window compare every note against the first note of the group.
#
########################
# Interfaces:
# Public functions:
# - classify(swing_notes: Sequence[NoteEvent]) -> SwingType
#
# Smoke Tests:
# - python swing_classifier.py
#
########################

from __future__ import annotations

from typing import Sequence

from map_models import ChainEvent, CutDirection, Hand, NoteEvent, SwingType


SAME_SNAP_BEATS = 0.01
DOT_SPAM_MIN_NOTES = 5


def _has_gap_from_first(notes: Sequence[NoteEvent]) -> bool:
    first = notes[0]
    for note in notes[1:]:
        if abs(int(note.x) - int(first.x)) > 1 or abs(int(note.y) - int(first.y)) > 1:
            return True
    return False


def classify(swing_notes: Sequence[NoteEvent]) -> SwingType:
    if not swing_notes:
        return SwingType.UNKNOWN

    if any(isinstance(note, ChainEvent) for note in swing_notes):
        return SwingType.CHAIN

    if len(swing_notes) == 1:
        return SwingType.NORMAL

    first_beat = float(swing_notes[0].beat)
    same_snap = all(abs(first_beat - float(note.beat)) < SAME_SNAP_BEATS for note in swing_notes)

    if same_snap:
        return SwingType.WINDOW if _has_gap_from_first(swing_notes) else SwingType.STACK

    if len(swing_notes) >= DOT_SPAM_MIN_NOTES and all(note.direction == CutDirection.ANY for note in swing_notes):
        return SwingType.DOT_SPAM

    return SwingType.SLIDER


def _run_unit_tests() -> None:
    def note(beat: float, x: int, y: int, direction: CutDirection = CutDirection.DOWN) -> NoteEvent:
        return NoteEvent(beat=beat, x=x, y=y, hand=Hand.LEFT, direction=direction)

    assert classify([]) == SwingType.UNKNOWN
    assert classify([note(0.0, 1, 0)]) == SwingType.NORMAL
    assert classify([note(0.0, 0, 0), note(0.0, 1, 1)]) == SwingType.STACK
    assert classify([note(0.0, 0, 0), note(0.0, 2, 1)]) == SwingType.WINDOW
    assert classify([note(0.0, 1, 0), note(0.25, 1, 1)]) == SwingType.SLIDER
    dots = [note(0.1 * index, 1, index % 3, CutDirection.ANY) for index in range(DOT_SPAM_MIN_NOTES)]
    assert classify(dots) == SwingType.DOT_SPAM
    assert classify([ChainEvent(beat=0.0, x=1, y=2, hand=Hand.LEFT, direction=CutDirection.DOWN)]) == SwingType.CHAIN


if __name__ == "__main__":
    _run_unit_tests()
    print("swing_classifier.py: ok")
