from __future__ import annotations

import math

from bot_state import BotState
from map_models import CutDirection, Hand, ObstacleEvent, Parity, ResetType, SwingType
from swing_data import SwingData, frame_from_note


def _swing(note, hand: Hand = Hand.RIGHT) -> SwingData:
    return SwingData(
        hand=hand,
        parity=Parity.FOREHAND,
        swing_type=SwingType.NORMAL,
        reset_type=ResetType.NONE,
        frames=(frame_from_note(note),),
        notes=(note,),
    )


def test_fork_keeps_parent_untouched(make_note) -> None:
    root = BotState.create_root()
    root.add_swing(_swing(make_note(0.0)))

    child = root.fork()
    child.add_swing(_swing(make_note(1.0, CutDirection.UP)))

    assert len(root.get_all_swings(Hand.RIGHT)) == 1
    assert [swing.start_frame.beat for swing in child.get_all_swings(Hand.RIGHT)] == [0.0, 1.0]
    assert child.parent is root
    assert root.children == [child]
    assert child.right_swings and not child.left_swings


def test_siblings_grow_independently(make_note) -> None:
    root = BotState.create_root()
    first = root.fork()
    second = root.fork()
    first.add_swing(_swing(make_note(1.0)))

    assert second.get_all_swings(Hand.RIGHT) == []
    assert second.last_swing(Hand.RIGHT) is None
    assert first.last_swing(Hand.RIGHT) is not None
    assert len(root.arena) == 3


def test_fork_copies_buffers(make_note) -> None:
    root = BotState.create_root()
    root.swing_buffer.process(make_note(0.0))
    child = root.fork()
    child.swing_buffer.force_flush(Hand.RIGHT)

    assert len(root.swing_buffer.get_buffer(Hand.RIGHT)) == 1


def test_joint_swing_data_is_sorted_by_start(make_note) -> None:
    state = BotState.create_root()
    state.add_swing(_swing(make_note(1.0)))
    state.add_swing(_swing(make_note(0.5, hand=Hand.LEFT), hand=Hand.LEFT))
    assert [swing.start_frame.beat for swing in state.get_joint_swing_data()] == [0.5, 1.0]


def test_movement_history_merges_lineage_by_beat() -> None:
    root = BotState.create_root()
    root.update_pose(2.0, right_hand=(3.0, 0.0))
    child = root.fork()
    child.update_pose(1.0, left_hand=(0.0, 2.0))

    assert [pose.beat for pose in child.get_all_movement_history()] == [1.0, 2.0]


def test_duplicate_pose_is_not_recorded() -> None:
    state = BotState.create_root()
    assert state.update_pose(1.0, left_hand=(0.0, 0.0)) is True
    assert state.update_pose(1.0, left_hand=(0.0, 0.0)) is False
    assert len(state.movement_history) == 1


def test_head_dodges_wall_and_waits_before_returning() -> None:
    state = BotState.create_root()
    state.wall_buffer.process(ObstacleEvent(beat=0.0, x=1, y=0, width=2, height=5, duration=1.0))

    state.update_pose(0.5)
    assert state.head_position == (0.0, 1.0)
    assert state.wall_buffer.last_dodge_influence == 1.0

    # Wall is gone, but the dodge happened less than two beats after it cleared.
    state.update_pose(2.0, left_hand=(0.0, 0.0))
    assert state.head_position == (0.0, 1.0)

    state.update_pose(3.5)
    assert state.head_position == (1.0, 1.0)
    assert state.wall_buffer.last_dodge_influence == 3.5


def test_head_ducks_under_overhead_wall() -> None:
    state = BotState.create_root()
    state.wall_buffer.process(ObstacleEvent(beat=0.0, x=0, y=2, width=4, height=1, duration=4.0))

    state.update_pose(1.0)
    assert state.head_position[1] == 0.0
    assert state.wall_buffer.last_duck_influence == 4.0


def test_head_takes_nearest_free_cell_when_fallbacks_are_blocked() -> None:
    state = BotState.create_root()
    # Covers rows 0 and 1 across the grid, so only the top row stays free.
    state.wall_buffer.process(ObstacleEvent(beat=0.0, x=0, y=0, width=4, height=2, duration=1.0))

    state.update_pose(0.5)

    assert state.head_position == (1.0, 2.0)
    assert state.wall_buffer.last_duck_influence == 1.0
    assert math.isinf(state.wall_buffer.last_dodge_influence)


def test_late_committed_pose_ignores_walls_that_start_later() -> None:
    state = BotState.create_root()
    state.wall_buffer.process(ObstacleEvent(beat=1.0, x=1, y=0, width=2, height=5, duration=1.0))
    state.update_pose(1.0)
    assert state.head_position == (0.0, 1.0)

    assert state.update_pose(0.0, right_hand=(2.0, 1.0)) is True

    assert state.beat_time == 1.0
    assert state.head_position == (0.0, 1.0)
    assert state.right_hand_position == (2.0, 1.0)
    assert [(pose.beat, pose.head) for pose in state.get_all_movement_history()] == [
        (0.0, (1.0, 1.0)),
        (1.0, (0.0, 1.0)),
    ]
