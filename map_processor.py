# -*- coding: utf-8 -*-
########################
# map_processor.py
########################
# Purpose:
# - Drive the simulation: merge the map object lists, walk them in beat order, and feed each object
#   to the buffers, the swing builder and the parity assessor.
# - Produce the final BotState holding swing and pose history.
#
# Design notes:
# - Single threaded and strictly in order. The state passed in is advanced in place.
# - Dispatch switches on each object's `kind`. Unknown kinds raise TypeError.
# - A reset swing is preceded by a BLANK connector swing so the motion trace stays continuous.
# - All-dot multi-note swings may be reversed once when that eases the next arrowed note on the hand.
# - Early stop still force-flushes both hands so the returned state is complete for queries.
#
########################
# Interfaces:
# Public constants:
# - CONTEXT_WINDOW_BEATS = 2.0
#
# Public classes:
# - class ContextWindow
#   - advance(current_beat: float) -> None
#   - items() -> list[MapObject]
#   - next_arrowed_note(hand: Hand, after_beat: float) -> Optional[NoteEvent]
#
# Public functions:
# - merge_map_objects(map_objects: MapObjects, start_beat: float = 0.0) -> list[MapObject]
# - run(map_objects, config=None, *, stop_after_kind=None, stop_after_count=None, max_objects=None) -> BotState
# - simulate(start_state, map_objects, *, stop_after_kind=None, stop_after_count=None, max_objects=None) -> BotState
# - generate_swing(state, notes, hand, context_window=None) -> Optional[SwingData]
#
########################

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, List, Optional, Sequence

import directions
import parity
import swing_classifier
from bot_state import BotState
from config import AnalysisConfig
from map_models import CutDirection, EventKind, Hand, MapObject, MapObjects, NoteEvent, ResetType, SwingType
from swing_data import SwingData, SwingDataBuilder, SwingFrame
from timing_model import swing_ebpm


logger = logging.getLogger(__name__)


CONTEXT_WINDOW_BEATS = 2.0

_NOTE_KINDS = (EventKind.NOTE, EventKind.CHAIN)


def merge_map_objects(map_objects: MapObjects, start_beat: float = 0.0) -> List[MapObject]:
    """One beat ordered list. Equal beats keep category order (notes, chains, bombs, obstacles, arcs)."""
    merged = sorted(map_objects.all_objects(), key=lambda item: float(item.beat))
    return [item for item in merged if float(item.beat) >= float(start_beat)]


class ContextWindow:
    def __init__(self, ordered_objects: Sequence[MapObject], span_beats: float = CONTEXT_WINDOW_BEATS) -> None:
        self._objects = ordered_objects
        self._span_beats = float(span_beats)
        self._queue: Deque[MapObject] = deque()
        self._end_index = 0

    def __len__(self) -> int:
        return len(self._queue)

    def __iter__(self):
        return iter(self._queue)

    def advance(self, current_beat: float) -> None:
        current = float(current_beat)
        while self._queue and float(self._queue[0].beat) < current:
            self._queue.popleft()

        limit = current + self._span_beats
        while self._end_index < len(self._objects) and float(self._objects[self._end_index].beat) <= limit:
            candidate = self._objects[self._end_index]
            if float(candidate.beat) >= current:
                self._queue.append(candidate)
            self._end_index += 1

    def items(self) -> List[MapObject]:
        return list(self._queue)

    def next_arrowed_note(self, hand: Hand, after_beat: float) -> Optional[NoteEvent]:
        for item in self._queue:
            if getattr(item, "kind", None) not in _NOTE_KINDS:
                continue
            if item.hand != hand or item.direction == CutDirection.ANY:
                continue
            if float(item.beat) > float(after_beat):
                return item
        return None


def _leading_direction(notes: Sequence[NoteEvent]) -> CutDirection:
    for note in sorted(notes, key=lambda item: float(item.beat)):
        if note.direction != CutDirection.ANY:
            return CutDirection(note.direction)
    return CutDirection.ANY


def _rotation_change(end_direction: CutDirection, next_direction: CutDirection, swing: SwingData) -> float:
    current_angle = parity.rotation(end_direction, swing.parity, swing.hand)
    next_angle = parity.rotation(next_direction, parity.opposite_parity(swing.parity), swing.hand)
    return abs(current_angle - next_angle)


def _maybe_reverse_dot_path(
    builder: SwingDataBuilder,
    hand: Hand,
    context_window: Optional[ContextWindow],
) -> None:
    if context_window is None:
        return

    candidate = builder.snapshot()
    if len(candidate.notes) < 2 or any(note.direction != CutDirection.ANY for note in candidate.notes):
        return

    upcoming = context_window.next_arrowed_note(hand, candidate.end_frame.beat)
    if upcoming is None:
        return

    end_direction = candidate.end_frame.direction
    current_cost = _rotation_change(end_direction, upcoming.direction, candidate)
    reversed_cost = _rotation_change(directions.opposite(end_direction), upcoming.direction, candidate)
    if reversed_cost < current_cost:
        logger.debug("Reversing dot path on %s at beat %.3f", hand.name, candidate.start_frame.beat)
        builder.reverse_path()


def generate_swing(
    state: BotState,
    notes: Sequence[NoteEvent],
    hand: Hand,
    context_window: Optional[ContextWindow] = None,
) -> Optional[SwingData]:
    """Build the swing for one finished note group. Returns None for an empty group."""
    if not notes:
        return None

    hand = Hand(hand)
    last_swing = state.last_swing(hand)
    if last_swing is None:
        starting_parity = parity.initial_parity(_leading_direction(notes))
    else:
        starting_parity = parity.opposite_parity(last_swing.parity)

    builder = (
        SwingDataBuilder()
        .with_hand(hand)
        .with_notes(notes)
        .with_parity(starting_parity)
        .with_swing_type(swing_classifier.classify(notes))
        .path_swing(last_swing)
    )
    if last_swing is None:
        _maybe_reverse_dot_path(builder, hand, context_window)
        return builder.build()

    candidate = builder.snapshot()
    context_items = context_window.items() if context_window is not None else None
    reset_type, predicted_parity = parity.assess_parity(last_swing, candidate, state.config, context_items)

    ebpm = swing_ebpm(last_swing.end_frame.time_ms, candidate.start_frame.time_ms)
    if last_swing.is_reset:
        ebpm *= 2.0

    builder.with_ebpm(ebpm).with_reset_type(reset_type).with_parity(predicted_parity)
    builder.path_swing(last_swing)
    _maybe_reverse_dot_path(builder, hand, context_window)
    return builder.build()


def _blank_connector(previous: SwingData, current: SwingData) -> SwingData:
    previous_end = previous.end_frame
    current_start = current.start_frame
    middle_beat = (float(previous_end.beat) + float(current_start.beat)) / 2.0
    middle_ms = (float(previous_end.time_ms) + float(current_start.time_ms)) / 2.0

    frames = [
        SwingFrame(
            beat=middle_beat,
            x=previous_end.x,
            y=previous_end.y,
            direction=directions.opposite(previous_end.direction),
            time_ms=middle_ms,
        ),
        SwingFrame(
            beat=middle_beat,
            x=current_start.x,
            y=current_start.y,
            direction=directions.opposite(current_start.direction),
            time_ms=middle_ms,
        ),
    ]
    return (
        SwingDataBuilder()
        .with_hand(previous.hand)
        .with_parity(parity.opposite_parity(previous.parity))
        .with_swing_type(SwingType.BLANK)
        .with_reset_type(ResetType.NONE)
        .with_frames(frames)
        .with_ebpm(swing_ebpm(previous_end.time_ms, current_start.time_ms))
        .build()
    )


def _commit_group(
    state: BotState,
    notes: Sequence[NoteEvent],
    hand: Hand,
    context_window: Optional[ContextWindow],
) -> None:
    previous = state.last_swing(hand)
    swing = generate_swing(state, notes, hand, context_window)
    if swing is None:
        return

    if swing.is_reset and previous is not None:
        logger.debug(
            "%s reset on %s at beat %.3f", swing.reset_type.name, hand.name, swing.start_frame.beat
        )
        state.add_swing(_blank_connector(previous, swing))

    state.add_swing(swing)
    end_position = (float(swing.end_frame.x), float(swing.end_frame.y))
    if hand == Hand.LEFT:
        state.update_pose(swing.end_frame.beat, left_hand=end_position)
    else:
        state.update_pose(swing.end_frame.beat, right_hand=end_position)


def _dispatch(state: BotState, item: MapObject, context_window: ContextWindow) -> None:
    kind = getattr(item, "kind", None)
    if kind in _NOTE_KINDS:
        group = state.swing_buffer.process(item)
        if group:
            _commit_group(state, group, Hand(item.hand), context_window)
    elif kind == EventKind.OBSTACLE:
        state.wall_buffer.process(item)
        state.update_pose(item.beat)
    elif kind == EventKind.BOMB:
        state.bomb_buffer.process(item)
    elif kind == EventKind.ARC:
        return
    else:
        raise TypeError(f"Unsupported map object: {type(item).__name__}")


def _validate_stop_options(
    stop_after_kind: Optional[EventKind],
    stop_after_count: Optional[int],
    max_objects: Optional[int],
) -> None:
    if (stop_after_kind is None) != (stop_after_count is None):
        raise ValueError("stop_after_kind and stop_after_count must be given together")
    if stop_after_count is not None and int(stop_after_count) < 0:
        raise ValueError("stop_after_count must be >= 0")
    if max_objects is not None and int(max_objects) < 0:
        raise ValueError("max_objects must be >= 0")


def simulate(
    start_state: BotState,
    map_objects: MapObjects,
    *,
    stop_after_kind: Optional[EventKind] = None,
    stop_after_count: Optional[int] = None,
    max_objects: Optional[int] = None,
) -> BotState:
    if start_state is None:
        raise ValueError("start_state is required")
    if map_objects is None:
        raise ValueError("map_objects is required")
    _validate_stop_options(stop_after_kind, stop_after_count, max_objects)

    ordered = merge_map_objects(map_objects, start_state.beat_time)
    context_window = ContextWindow(ordered)
    state = start_state

    processed_total = 0
    processed_of_kind = 0
    for item in ordered:
        if max_objects is not None and processed_total >= int(max_objects):
            break
        if stop_after_count is not None and processed_of_kind >= int(stop_after_count):
            break

        context_window.advance(item.beat)
        _dispatch(state, item, context_window)

        processed_total += 1
        if stop_after_kind is not None and getattr(item, "kind", None) == stop_after_kind:
            processed_of_kind += 1

    for hand in (Hand.LEFT, Hand.RIGHT):
        remaining = state.swing_buffer.force_flush(hand)
        if remaining:
            _commit_group(state, remaining, hand, context_window)

    logger.debug(
        "Simulated %d of %d objects: %d left swings, %d right swings",
        processed_total,
        len(ordered),
        len(state.left_swings),
        len(state.right_swings),
    )
    return state


def run(
    map_objects: MapObjects,
    config: Optional[AnalysisConfig] = None,
    *,
    stop_after_kind: Optional[EventKind] = None,
    stop_after_count: Optional[int] = None,
    max_objects: Optional[int] = None,
) -> BotState:
    """Simulate a whole map from a fresh root state."""
    if map_objects is None:
        raise ValueError("map_objects is required")
    root = BotState.create_root(config)
    return simulate(
        root,
        map_objects,
        stop_after_kind=stop_after_kind,
        stop_after_count=stop_after_count,
        max_objects=max_objects,
    )


def _run_unit_tests() -> None:
    from types import SimpleNamespace

    def note(beat: float, direction: CutDirection, x: int = 1, y: int = 0, hand: Hand = Hand.RIGHT) -> NoteEvent:
        return NoteEvent(beat=beat, x=x, y=y, hand=hand, direction=direction, time_ms=beat * 500.0)

    objects = MapObjects(
        notes=[
            note(0.0, CutDirection.DOWN),
            note(1.0, CutDirection.UP),
            note(2.0, CutDirection.DOWN),
            note(2.0, CutDirection.DOWN, x=0, hand=Hand.LEFT),
        ]
    )
    state = run(objects)
    right = state.get_all_swings(Hand.RIGHT)
    assert [swing.parity for swing in right] == [
        parity.Parity.FOREHAND,
        parity.Parity.BACKHAND,
        parity.Parity.FOREHAND,
    ]
    assert right[0].ebpm == 0.0 and abs(right[1].ebpm - 60.0) < 1e-9
    assert len(state.get_all_swings(Hand.LEFT)) == 1

    partial = run(objects, stop_after_kind=EventKind.NOTE, stop_after_count=2)
    assert len(partial.get_all_swings(Hand.RIGHT)) == 2

    window = ContextWindow(merge_map_objects(objects))
    window.advance(0.0)
    assert [item.beat for item in window.items()] == [0.0, 1.0, 2.0, 2.0]
    window.advance(1.0)
    assert [item.beat for item in window.items()] == [1.0, 2.0, 2.0]

    try:
        simulate(BotState.create_root(), MapObjects(notes=[SimpleNamespace(beat=0.0)]))  # type: ignore[list-item]
    except TypeError:
        pass
    else:
        raise AssertionError("Expected a failure for an unknown map object")


if __name__ == "__main__":
    _run_unit_tests()
    print("map_processor.py: ok")
