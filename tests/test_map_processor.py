from __future__ import annotations

from types import SimpleNamespace

import pytest

import map_processor
import sample_map
from bot_state import BotState
from config import AnalysisConfig
from map_models import (
    ArcEvent,
    BombEvent,
    ChainEvent,
    CutDirection,
    EventKind,
    Hand,
    MapObjects,
    ObstacleEvent,
    Parity,
    ResetType,
    SwingType,
)
from timing_model import swing_ebpm


def _note_swings(state: BotState, hand: Hand):
    return state.get_all_swings(hand, include_blanks=False)


def test_four_close_up_notes_form_one_slider(make_note) -> None:
    notes = [make_note(beat, CutDirection.UP, time_ms=beat * 100.0) for beat in (0.0, 0.5, 1.0, 1.5)]
    state = map_processor.run(MapObjects(notes=notes))

    swings = state.get_all_swings(Hand.RIGHT)
    assert len(swings) == 1
    assert swings[0].swing_type == SwingType.SLIDER
    assert [frame.beat for frame in swings[0].frames] == [0.0, 0.5, 1.0, 1.5]
    assert all(frame.direction == CutDirection.UP for frame in swings[0].frames)


def test_double_down_resets_with_blank_connector(make_note) -> None:
    config = AnalysisConfig(angle_tolerance=90.0)
    notes = [
        make_note(0.0, CutDirection.DOWN, y=0),
        make_note(1.0, CutDirection.DOWN, y=2),
        make_note(2.0, CutDirection.UP, y=0),
    ]
    state = map_processor.run(MapObjects(notes=notes), config)

    swings = state.get_all_swings(Hand.RIGHT)
    assert [swing.swing_type for swing in swings] == [SwingType.NORMAL, SwingType.BLANK, SwingType.NORMAL, SwingType.NORMAL]
    first, blank, reset, follow = swings

    assert reset.reset_type == ResetType.ANGLE
    assert reset.parity == first.parity == Parity.FOREHAND
    assert follow.parity == Parity.BACKHAND

    assert blank.notes == ()
    assert blank.parity == Parity.BACKHAND
    assert blank.reset_type == ResetType.NONE
    assert [(frame.x, frame.y) for frame in blank.frames] == [(1.0, 0.0), (1.0, 2.0)]
    assert [frame.direction for frame in blank.frames] == [CutDirection.UP, CutDirection.UP]
    assert all(frame.beat == 0.5 for frame in blank.frames)

    # The swing after a reset counts double.
    assert reset.ebpm == pytest.approx(60.0)
    assert follow.ebpm == pytest.approx(120.0)


def test_default_thresholds_keep_simple_alternation(make_note) -> None:
    notes = [make_note(float(beat), CutDirection.DOWN if beat % 2 == 0 else CutDirection.UP) for beat in range(8)]
    state = map_processor.run(MapObjects(notes=notes))
    swings = state.get_all_swings(Hand.RIGHT)
    assert all(not swing.is_reset for swing in swings)
    assert [swing.parity for swing in swings[:2]] == [Parity.FOREHAND, Parity.BACKHAND]


@pytest.mark.parametrize("difficulty", ["easy", "medium", "hard"])
@pytest.mark.parametrize("angle_tolerance", [270.0, 90.0])
def test_parity_alternates_unless_reset(difficulty: str, angle_tolerance: float) -> None:
    objects = sample_map.build_sample_map(difficulty=difficulty).map_objects
    state = map_processor.run(objects, AnalysisConfig(angle_tolerance=angle_tolerance))

    for hand in (Hand.LEFT, Hand.RIGHT):
        swings = _note_swings(state, hand)
        assert swings
        for previous, current in zip(swings, swings[1:]):
            assert (current.parity != previous.parity) != current.is_reset


def test_equal_boundaries_give_zero_ebpm(make_note) -> None:
    assert swing_ebpm(250.0, 250.0) == 0.0
    assert swing_ebpm(0.0, 125.0) > 0.0

    notes = [make_note(0.0, CutDirection.DOWN), make_note(0.0, CutDirection.UP, x=3, y=2, time_ms=0.0)]
    state = map_processor.run(MapObjects(notes=notes))
    assert all(swing.ebpm == 0.0 for swing in state.get_all_swings(Hand.RIGHT))


def test_trailing_notes_are_flushed_for_both_hands(make_note) -> None:
    notes = [make_note(0.0, hand=Hand.LEFT, x=0), make_note(0.0, hand=Hand.RIGHT, x=3)]
    state = map_processor.run(MapObjects(notes=notes))
    assert len(state.get_all_swings(Hand.LEFT)) == 1
    assert len(state.get_all_swings(Hand.RIGHT)) == 1
    assert state.left_hand_position == (0.0, 0.0)
    assert state.right_hand_position == (3.0, 0.0)


def test_early_stop_by_kind_and_by_total(make_note) -> None:
    notes = [make_note(float(beat), CutDirection.DOWN if beat % 2 == 0 else CutDirection.UP) for beat in range(6)]
    objects = MapObjects(notes=notes, bombs=[BombEvent(beat=0.5, x=0, y=0, time_ms=250.0)])

    by_kind = map_processor.run(objects, stop_after_kind=EventKind.NOTE, stop_after_count=3)
    assert len(by_kind.get_all_swings(Hand.RIGHT)) == 3

    by_total = map_processor.run(objects, max_objects=2)
    assert len(by_total.get_all_swings(Hand.RIGHT)) == 1
    assert len(by_total.bomb_buffer.active_bombs()) == 1


def test_obstacles_move_the_head_and_arcs_are_inert(make_note) -> None:
    objects = MapObjects(
        notes=[make_note(4.0)],
        obstacles=[ObstacleEvent(beat=1.0, x=1, y=0, width=2, height=5, duration=1.0, time_ms=500.0)],
        arcs=[
            ArcEvent(beat=2.0, x=1, y=0, hand=Hand.RIGHT, direction=CutDirection.DOWN, tail_beat=3.0, tail_x=1, tail_y=0)
        ],
    )
    state = map_processor.run(objects)
    heads = [pose.head for pose in state.get_all_movement_history()]
    assert heads[0] == (0.0, 1.0)
    assert len(state.get_all_swings(Hand.RIGHT)) == 1


def test_chain_finishes_at_its_tail() -> None:
    chain = ChainEvent(
        beat=0.0,
        x=1,
        y=2,
        hand=Hand.LEFT,
        direction=CutDirection.DOWN,
        time_ms=0.0,
        tail_beat=0.5,
        tail_x=1,
        tail_y=0,
        tail_time_ms=250.0,
    )
    state = map_processor.run(MapObjects(chains=[chain]))
    swing = state.get_all_swings(Hand.LEFT)[0]
    assert swing.swing_type == SwingType.CHAIN
    assert (swing.end_frame.x, swing.end_frame.y) == (1.0, 0.0)
    assert state.left_hand_position == (1.0, 0.0)


def test_merge_is_stable_by_category_and_drops_early_objects(make_note) -> None:
    bomb = BombEvent(beat=1.0, x=0, y=0)
    note = make_note(1.0)
    early = make_note(0.0)
    merged = map_processor.merge_map_objects(MapObjects(notes=[note, early], bombs=[bomb]), start_beat=0.5)
    assert merged == [note, bomb]


def test_context_window_spans_two_beats(make_note) -> None:
    ordered = [make_note(beat) for beat in (0.0, 1.0, 2.0, 2.5, 3.0)]
    window = map_processor.ContextWindow(ordered)
    window.advance(0.0)
    assert [item.beat for item in window] == [0.0, 1.0, 2.0]
    window.advance(1.0)
    assert [item.beat for item in window] == [1.0, 2.0, 2.5, 3.0]
    assert window.next_arrowed_note(Hand.RIGHT, 2.0).beat == 2.5
    assert window.next_arrowed_note(Hand.LEFT, 0.0) is None


def test_unknown_object_kind_raises_type_error() -> None:
    with pytest.raises(TypeError):
        map_processor.run(MapObjects(notes=[SimpleNamespace(beat=0.0)]))


def test_missing_inputs_raise_value_error() -> None:
    with pytest.raises(ValueError):
        map_processor.run(None)
    with pytest.raises(ValueError):
        map_processor.simulate(None, MapObjects())
    with pytest.raises(ValueError):
        map_processor.run(MapObjects(), stop_after_kind=EventKind.NOTE)


def test_simulate_continues_from_forked_state(make_note) -> None:
    first_half = MapObjects(notes=[make_note(0.0, CutDirection.DOWN), make_note(1.0, CutDirection.UP)])
    state = map_processor.run(first_half)

    branch = state.fork()
    map_processor.simulate(branch, MapObjects(notes=[make_note(2.0, CutDirection.DOWN)]))

    assert len(state.get_all_swings(Hand.RIGHT)) == 2
    assert [swing.parity for swing in branch.get_all_swings(Hand.RIGHT)] == [
        Parity.FOREHAND,
        Parity.BACKHAND,
        Parity.FOREHAND,
    ]


def test_dot_group_is_reversed_toward_next_arrow(make_note) -> None:
    dots = [
        make_note(0.0, CutDirection.ANY, x=1, y=0, time_ms=0.0),
        make_note(0.1, CutDirection.ANY, x=1, y=1, time_ms=40.0),
        make_note(0.2, CutDirection.ANY, x=1, y=2, time_ms=80.0),
    ]
    # The dots climb upward, so a following up arrow is awkward unless the path is flipped.
    follow = make_note(1.0, CutDirection.UP, x=1, y=0)
    state = map_processor.run(MapObjects(notes=dots + [follow]))

    first = state.get_all_swings(Hand.RIGHT)[0]
    assert first.end_frame.direction == CutDirection.DOWN
    assert [note.y for note in first.notes] == [2, 1, 0]


def test_wall_after_a_swing_does_not_move_the_head_at_that_swing(make_note) -> None:
    objects = MapObjects(
        notes=[make_note(0.0, CutDirection.DOWN, x=2), make_note(3.0, CutDirection.UP, x=2)],
        obstacles=[ObstacleEvent(beat=1.0, x=1, y=0, width=2, height=5, duration=1.0, time_ms=500.0)],
    )
    state = map_processor.run(objects)

    trace = [(pose.beat, pose.head) for pose in state.get_all_movement_history()]
    assert trace[0] == (0.0, (1.0, 1.0))
    assert trace[1] == (1.0, (0.0, 1.0))
    assert state.beat_time == 3.0


def test_blank_connector_breaks_alternation_only_in_the_full_trace(make_note) -> None:
    notes = [
        make_note(0.0, CutDirection.DOWN, y=0),
        make_note(1.0, CutDirection.DOWN, y=2),
        make_note(2.0, CutDirection.UP, y=0),
    ]
    state = map_processor.run(MapObjects(notes=notes), AnalysisConfig(angle_tolerance=90.0))

    note_swings = _note_swings(state, Hand.RIGHT)
    for previous, current in zip(note_swings, note_swings[1:]):
        assert (current.parity != previous.parity) != current.is_reset

    traced = state.get_all_swings(Hand.RIGHT)
    blank, reset = traced[1], traced[2]
    assert blank.swing_type == SwingType.BLANK
    assert reset.is_reset and reset.parity != blank.parity
