from __future__ import annotations

import pytest

import swing_utils
from map_models import ChainEvent, CutDirection, Hand, Parity, ResetType, SwingType
from swing_classifier import classify
from swing_data import SwingData, SwingDataBuilder, SwingFrame, frame_from_note


@pytest.mark.parametrize("direction", [direction for direction in CutDirection if direction != CutDirection.ANY])
def test_single_arrow_note_yields_one_matching_frame(make_note, direction: CutDirection) -> None:
    note = make_note(2.0, direction, x=3, y=1)
    swing = SwingDataBuilder().with_hand(Hand.RIGHT).with_notes([note]).path_swing().build()

    assert len(swing.frames) == 1
    frame = swing.start_frame
    assert (frame.x, frame.y, frame.direction, frame.beat) == (3.0, 1.0, direction, 2.0)


def test_reverse_path_twice_round_trips_frames_and_notes(make_note) -> None:
    notes = [
        make_note(0.0, CutDirection.ANY, x=0, y=0),
        make_note(0.1, CutDirection.ANY, x=1, y=1),
        make_note(0.2, CutDirection.ANY, x=2, y=2),
    ]
    original = SwingDataBuilder().with_notes(notes).path_swing().snapshot()

    builder = SwingDataBuilder().with_notes(notes).path_swing()
    once = builder.reverse_path().snapshot()
    twice = builder.reverse_path().build()

    assert once.frames != original.frames
    assert [frame.x for frame in once.frames] == [2.0, 1.0, 0.0]
    assert [frame.beat for frame in once.frames] == [0.0, 0.1, 0.2]
    assert twice.frames == original.frames
    assert twice.notes == original.notes


def test_build_consumes_builder(make_note) -> None:
    builder = SwingDataBuilder().with_notes([make_note(0.0)]).path_swing()
    builder.build()
    with pytest.raises(RuntimeError):
        builder.reverse_path()


def test_swing_without_frames_is_rejected() -> None:
    with pytest.raises(ValueError):
        SwingData(
            hand=Hand.LEFT,
            parity=Parity.FOREHAND,
            swing_type=SwingType.NORMAL,
            reset_type=ResetType.NONE,
            frames=(),
            notes=(),
        )


def test_same_beat_one_column_apart_is_stack(make_note) -> None:
    notes = [make_note(1.0, CutDirection.UP, x=0, y=0), make_note(1.0, CutDirection.DOWN, x=1, y=0)]
    assert classify(notes) == SwingType.STACK


def test_same_beat_knight_offset_is_window(make_note) -> None:
    notes = [make_note(1.0, CutDirection.UP, x=0, y=0), make_note(1.0, CutDirection.DOWN, x=2, y=1)]
    assert classify(notes) == SwingType.WINDOW


def test_classifier_other_shapes(make_note) -> None:
    assert classify([]) == SwingType.UNKNOWN
    assert classify([make_note(0.0)]) == SwingType.NORMAL
    dots = [make_note(0.05 * index, CutDirection.ANY) for index in range(5)]
    assert classify(dots) == SwingType.DOT_SPAM
    assert classify(dots[:4]) == SwingType.SLIDER
    chain = ChainEvent(beat=0.0, x=1, y=2, hand=Hand.RIGHT, direction=CutDirection.DOWN, tail_beat=0.5)
    assert classify([chain]) == SwingType.CHAIN


def test_knight_offset_window_gets_shared_diagonal(make_note) -> None:
    notes = [make_note(1.0, CutDirection.ANY, x=0, y=0), make_note(1.0, CutDirection.ANY, x=2, y=1)]
    swing = SwingDataBuilder().with_notes(notes).path_swing().build()
    assert [frame.direction for frame in swing.frames] == [CutDirection.UP_RIGHT, CutDirection.UP_RIGHT]
    assert [(frame.x, frame.y) for frame in swing.frames] == [(0.0, 0.0), (2.0, 1.0)]


def test_arrowed_stack_orders_along_cut_direction(make_note) -> None:
    bottom = make_note(1.0, CutDirection.DOWN, x=1, y=0)
    top = make_note(1.0, CutDirection.DOWN, x=1, y=2)
    ordered = swing_utils.snapped_swing_sort([bottom, top])
    assert ordered == [top, bottom]


def test_chain_emits_head_and_tail_frames() -> None:
    chain = ChainEvent(
        beat=0.0,
        x=1,
        y=2,
        hand=Hand.RIGHT,
        direction=CutDirection.DOWN,
        time_ms=0.0,
        tail_beat=0.25,
        tail_x=1,
        tail_y=0,
        tail_time_ms=125.0,
    )
    swing = SwingDataBuilder().with_notes([chain]).path_swing().build()
    assert len(swing.frames) == 2
    assert swing.end_frame == SwingFrame(beat=0.25, x=1.0, y=0.0, direction=CutDirection.DOWN, time_ms=125.0)


def test_single_dot_after_swing_on_same_cell_returns_upward(make_note) -> None:
    previous_note = make_note(0.0, CutDirection.DOWN, x=1, y=0)
    previous = SwingData(
        hand=Hand.RIGHT,
        parity=Parity.FOREHAND,
        swing_type=SwingType.NORMAL,
        reset_type=ResetType.NONE,
        frames=(frame_from_note(previous_note),),
        notes=(previous_note,),
    )
    dot = make_note(1.0, CutDirection.ANY, x=1, y=0)

    assert swing_utils.dot_cut_direction(previous, [dot], next_is_reset=False) == CutDirection.UP
    assert swing_utils.dot_cut_direction(previous, [dot], next_is_reset=True) == CutDirection.DOWN

    swing = SwingDataBuilder().with_notes([dot]).path_swing(previous).build()
    assert swing.start_frame.direction == CutDirection.UP


def test_furthest_apart_notes_picks_the_widest_pair(make_note) -> None:
    near, middle, far = make_note(0.0, x=0, y=0), make_note(0.0, x=1, y=1), make_note(0.0, x=3, y=2)
    assert swing_utils.furthest_apart_notes([near, middle, far]) == (near, far)
    assert swing_utils.furthest_apart_notes([middle]) == (middle, middle)


def _dot_pair(make_note):
    return [make_note(1.0, CutDirection.ANY, x=1, y=0), make_note(1.0, CutDirection.ANY, x=2, y=0)]


def test_same_beat_dots_are_ordered_along_their_furthest_line(make_note) -> None:
    dots = [make_note(1.0, CutDirection.ANY, x=x, y=x) for x in (1, 0, 2)]
    ordered = swing_utils.snapped_swing_sort(dots)
    assert [(note.x, note.y) for note in ordered] == [(0, 0), (1, 1), (2, 2)]


def test_dot_pair_keeps_order_when_previous_note_is_directly_behind(make_note) -> None:
    # The approach from (3, 0) is exactly opposite the pair's line, which is not a reversal.
    previous = make_note(0.0, CutDirection.LEFT, x=3, y=0)
    ordered = swing_utils.snapped_swing_sort(_dot_pair(make_note), last_note=previous)
    assert [note.x for note in ordered] == [1, 2]


def test_dot_pair_reverses_for_an_obtuse_approach(make_note) -> None:
    previous = make_note(0.0, CutDirection.LEFT, x=3, y=1)
    ordered = swing_utils.snapped_swing_sort(_dot_pair(make_note), last_note=previous)
    assert [note.x for note in ordered] == [2, 1]


def test_dot_pair_reverses_when_only_next_note_is_directly_behind(make_note) -> None:
    following = make_note(2.0, CutDirection.LEFT, x=0, y=0)
    ordered = swing_utils.snapped_swing_sort(_dot_pair(make_note), next_note=following)
    assert [note.x for note in ordered] == [2, 1]
