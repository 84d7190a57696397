# -*- coding: utf-8 -*-
########################
# swing_utils.py
########################
# Purpose:
# - Ordering helpers for notes that share a time snap inside one swing.
# - Direction heuristic for single dot notes.
#
# Design notes:
# - Pure functions. Sorting is stable so equal projections keep group order.
# - The reversal rule for all-dot clusters is asymmetric on purpose: a previous reference note only
#   reverses for angles strictly between 90 and 180 degrees, a next reference note for any angle
#   above 90 degrees.
#
########################
# Interfaces:
# Public functions:
# - sort_notes(notes: Sequence[NoteEvent], last_swing: Optional[SwingData]) -> list[list[NoteEvent]]
# - flatten(groups: Sequence[Sequence[NoteEvent]]) -> list[NoteEvent]
# - snapped_swing_sort(notes, last_note=None, next_note=None) -> list[NoteEvent]
# - furthest_apart_notes(notes) -> tuple[NoteEvent, NoteEvent]
# - dot_cut_direction(last_swing: SwingData, next_notes: Sequence[NoteEvent], next_is_reset: bool) -> CutDirection
#
########################

from __future__ import annotations

import itertools
import math
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

import directions
from map_models import CutDirection, NoteEvent

if TYPE_CHECKING:
    from swing_data import SwingData


SNAP_DECIMALS = 3
DIAGONAL_REACH = 1.42


def _position(note: NoteEvent) -> Tuple[float, float]:
    return (float(note.x), float(note.y))


def _angle_between(first: Tuple[float, float], second: Tuple[float, float]) -> float:
    return math.acos(max(-1.0, min(1.0, directions.dot(first, second))))


def flatten(groups: Sequence[Sequence[NoteEvent]]) -> List[NoteEvent]:
    return [note for group in groups for note in group]


def sort_notes(notes: Sequence[NoteEvent], last_swing: Optional["SwingData"]) -> List[List[NoteEvent]]:
    """Group notes by time snap in chronological order, ordering each multi-note snap geometrically."""
    sorted_by_time = sorted(notes, key=lambda note: float(note.beat))
    last_note = last_swing.notes[-1] if last_swing is not None and last_swing.notes else None

    snaps = [
        list(group)
        for _snap, group in itertools.groupby(sorted_by_time, key=lambda note: round(float(note.beat), SNAP_DECIMALS))
    ]

    sorted_groups: List[List[NoteEvent]] = []
    for index, notes_this_snap in enumerate(snaps):
        if len(notes_this_snap) > 1:
            next_note = snaps[index + 1][0] if index + 1 < len(snaps) else None
            notes_this_snap = snapped_swing_sort(notes_this_snap, last_note, next_note)
        sorted_groups.append(notes_this_snap)
    return sorted_groups


def furthest_apart_notes(notes: Sequence[NoteEvent]) -> Tuple[NoteEvent, NoteEvent]:
    if len(notes) < 2:
        return (notes[0], notes[0])

    best_pair = (notes[0], notes[1])
    best_distance = -1.0
    for first_index, first in enumerate(notes):
        for second in notes[first_index + 1:]:
            distance = (float(second.x) - float(first.x)) ** 2 + (float(second.y) - float(first.y)) ** 2
            if distance > best_distance:
                best_distance = distance
                best_pair = (first, second)
    return best_pair


def snapped_swing_sort(
    notes_to_sort: Sequence[NoteEvent],
    last_note: Optional[NoteEvent] = None,
    next_note: Optional[NoteEvent] = None,
) -> List[NoteEvent]:
    arrowed = [note for note in notes_to_sort if note.direction != CutDirection.ANY]
    if arrowed:
        total_x = sum(directions.direction_vector(note.direction)[0] for note in arrowed)
        total_y = sum(directions.direction_vector(note.direction)[1] for note in arrowed)
        average = (total_x / len(arrowed), total_y / len(arrowed))
        return sorted(notes_to_sort, key=lambda note: directions.dot(_position(note), average))

    # All dots: order along the line between the two furthest notes.
    note_a, note_b = furthest_apart_notes(notes_to_sort)
    position_a = _position(note_a)
    position_b = _position(note_b)
    a_to_b = directions.normalize((position_b[0] - position_a[0], position_b[1] - position_a[1]))

    should_reverse = False
    if last_note is not None:
        last_position = _position(last_note)
        last_to_first = directions.normalize((position_a[0] - last_position[0], position_a[1] - last_position[1]))
        angle = _angle_between(last_to_first, a_to_b)
        if math.pi / 2 < angle < math.pi:
            should_reverse = True
    elif next_note is not None:
        next_position = _position(next_note)
        last_to_next = directions.normalize((next_position[0] - position_b[0], next_position[1] - position_b[1]))
        angle = _angle_between(last_to_next, a_to_b)
        if angle > math.pi / 2:
            should_reverse = True

    sorted_notes = sorted(notes_to_sort, key=lambda note: directions.dot(_position(note), a_to_b))
    if should_reverse:
        sorted_notes.reverse()
    return sorted_notes


def dot_cut_direction(
    last_swing: "SwingData",
    next_notes: Sequence[NoteEvent],
    next_is_reset: bool,
) -> CutDirection:
    """Direction for a single dot swing, continuing from the previous swing on the same hand."""
    next_note = next_notes[0]
    last_end_direction = last_swing.end_frame.direction
    if next_is_reset:
        return last_end_direction

    last_note = last_swing.notes[-1] if last_swing.notes else None
    last_position = (float(last_swing.end_frame.x), float(last_swing.end_frame.y))
    if last_note is not None:
        last_position = _position(last_note)

    return_direction = directions.opposite(last_end_direction)
    if last_position == _position(next_note):
        return return_direction

    note_to_note = directions.direction_from_vector(
        float(next_note.x) - last_position[0],
        float(next_note.y) - last_position[1],
    )
    distance = math.hypot(float(next_note.x) - last_position[0], float(next_note.y) - last_position[1])
    return directions.midway_to(return_direction, note_to_note, toward_target=distance > DIAGONAL_REACH)
