# -*- coding: utf-8 -*-
########################
# bot_state.py
########################
# Purpose:
# - The simulation's running record: per hand swing history, pose history, buffers and config.
# - States form a lineage tree so a caller can fork a hypothetical continuation without touching
#   the state it was forked from.
#
# Design notes:
# - Nodes live in a StateArena and refer to each other by index. A node never mutates its parent.
# - Each node keeps only its own (local) records. Full history is the root-to-node concatenation.
# - Only the merged pose history is re-sorted (stable, by beat) because forked branches can interleave.
# - Head placement avoids walls: return to neutral when no dodge/duck happened in the last 2 beats,
#   otherwise hold; if the wanted cell is blocked use the fallback list, then the nearest free cell.
# - A swing pose lands after later objects were seen. Such a pose keeps the head in effect at its
#   beat, and beat_time never moves backwards.
#
########################
# Interfaces:
# Public dataclasses:
# - BotPose(beat: float, left_hand: (x, y), right_hand: (x, y), head: (x, y))
#
# Public classes:
# - class StateArena
#   - add(state: BotState) -> int
#   - node(index: int) -> BotState
#   - nodes() -> list[BotState]
# - class BotState
#   - create_root(config: Optional[AnalysisConfig] = None) -> BotState  (classmethod)
#   - parent / children / lineage()
#   - fork() -> BotState
#   - add_swing(swing: SwingData) -> None
#   - get_all_swings(hand: Hand, include_blanks: bool = True) -> list[SwingData]
#   - last_swing(hand: Hand) -> Optional[SwingData]
#   - get_joint_swing_data() -> list[SwingData]
#   - get_all_movement_history() -> list[BotPose]
#   - update_pose(beat: float, left_hand=None, right_hand=None) -> bool
#
########################

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import config as config_module
from bomb_buffer import BombBuffer
from map_models import Hand, SwingType
from swing_buffer import SwingBuffer
from swing_data import SwingData
from wall_buffer import WallBuffer


logger = logging.getLogger(__name__)


Position = Tuple[float, float]

NEUTRAL_RETURN_BEATS = 2.0
NEUTRAL_HEAD_ROW = 1
HEAD_FALLBACK_CELLS: Tuple[Tuple[int, int], ...] = (
    (1, 1),
    (2, 1),  # center, standing
    (1, 0),
    (2, 0),  # center, ducked
    (0, 1),
    (3, 1),  # outer, standing
    (0, 0),
    (3, 0),  # outer, ducked
)

DEFAULT_LEFT_HAND: Position = (1.0, 0.0)
DEFAULT_RIGHT_HAND: Position = (2.0, 0.0)
DEFAULT_HEAD: Position = (1.0, float(NEUTRAL_HEAD_ROW))


@dataclass(frozen=True)
class BotPose:
    beat: float
    left_hand: Position
    right_hand: Position
    head: Position

    def is_same_as(self, other: "BotPose") -> bool:
        return self == other


class StateArena:
    def __init__(self) -> None:
        self._nodes: List[BotState] = []

    def __len__(self) -> int:
        return len(self._nodes)

    def add(self, state: "BotState") -> int:
        self._nodes.append(state)
        return len(self._nodes) - 1

    def node(self, index: int) -> "BotState":
        return self._nodes[int(index)]

    def nodes(self) -> List["BotState"]:
        return list(self._nodes)


def _manhattan(first: Tuple[int, int], second: Tuple[int, int]) -> int:
    return abs(first[0] - second[0]) + abs(first[1] - second[1])


class BotState:
    def __init__(
        self,
        arena: StateArena,
        parent_index: Optional[int],
        analysis_config: config_module.AnalysisConfig,
    ) -> None:
        self._arena = arena
        self.parent_index = parent_index
        self.child_indices: List[int] = []
        self.config = analysis_config

        self.left_swings: List[SwingData] = []
        self.right_swings: List[SwingData] = []
        self.movement_history: List[BotPose] = []

        self.beat_time = 0.0
        self.left_hand_position: Position = DEFAULT_LEFT_HAND
        self.right_hand_position: Position = DEFAULT_RIGHT_HAND
        self.head_position: Position = DEFAULT_HEAD

        self.swing_buffer = SwingBuffer(analysis_config.slider_precision, analysis_config.max_slider_length)
        self.wall_buffer = WallBuffer()
        self.bomb_buffer = BombBuffer()

        self.index = arena.add(self)
        if parent_index is not None:
            arena.node(parent_index).child_indices.append(self.index)

    @classmethod
    def create_root(
        cls,
        analysis_config: Optional[config_module.AnalysisConfig] = None,
        arena: Optional[StateArena] = None,
    ) -> "BotState":
        resolved_config = analysis_config if analysis_config is not None else config_module.default_config()
        return cls(arena if arena is not None else StateArena(), None, resolved_config)

    @property
    def arena(self) -> StateArena:
        return self._arena

    @property
    def parent(self) -> Optional["BotState"]:
        if self.parent_index is None:
            return None
        return self._arena.node(self.parent_index)

    @property
    def children(self) -> List["BotState"]:
        return [self._arena.node(index) for index in self.child_indices]

    def lineage(self) -> List["BotState"]:
        """States from the root down to (and including) this state."""
        chain: List[BotState] = []
        state: Optional[BotState] = self
        while state is not None:
            chain.append(state)
            state = state.parent
        chain.reverse()
        return chain

    def fork(self) -> "BotState":
        clone = BotState(self._arena, self.index, self.config)
        clone.beat_time = self.beat_time
        clone.left_hand_position = self.left_hand_position
        clone.right_hand_position = self.right_hand_position
        clone.head_position = self.head_position
        clone.swing_buffer = self.swing_buffer.clone()
        clone.wall_buffer = self.wall_buffer.clone()
        clone.bomb_buffer = self.bomb_buffer.clone()
        logger.debug("Forked state %d from %d at beat %.3f", clone.index, self.index, self.beat_time)
        return clone

    def local_swings(self, hand: Hand) -> List[SwingData]:
        return self.right_swings if Hand(hand) == Hand.RIGHT else self.left_swings

    def add_swing(self, swing: SwingData) -> None:
        self.local_swings(swing.hand).append(swing)

    def get_all_swings(self, hand: Hand, include_blanks: bool = True) -> List[SwingData]:
        """Root-to-node swing history for one hand.

        With blanks included this is the full motion trace, where a reset swing follows a blank
        connector of the opposite parity. Parity alternates swing to swing unless a reset is tagged
        only across note swings, so pass include_blanks=False when checking that.
        """
        swings: List[SwingData] = []
        for state in self.lineage():
            swings.extend(state.local_swings(hand))
        if not include_blanks:
            swings = [swing for swing in swings if swing.swing_type != SwingType.BLANK]
        return swings

    def last_swing(self, hand: Hand) -> Optional[SwingData]:
        """Most recent note swing on a hand, searching ancestors when this node has none."""
        state: Optional[BotState] = self
        while state is not None:
            for swing in reversed(state.local_swings(hand)):
                if swing.swing_type != SwingType.BLANK:
                    return swing
            state = state.parent
        return None

    def get_joint_swing_data(self, include_blanks: bool = True) -> List[SwingData]:
        combined = self.get_all_swings(Hand.LEFT, include_blanks) + self.get_all_swings(Hand.RIGHT, include_blanks)
        combined.sort(key=lambda swing: float(swing.start_frame.beat))
        return combined

    def get_all_movement_history(self) -> List[BotPose]:
        poses: List[BotPose] = []
        for state in self.lineage():
            poses.extend(state.movement_history)
        poses.sort(key=lambda pose: float(pose.beat))
        return poses

    def latest_pose(self) -> Optional[BotPose]:
        state: Optional[BotState] = self
        while state is not None:
            if state.movement_history:
                return state.movement_history[-1]
            state = state.parent
        return None

    def _resolve_head(self, beat: float, left_hand: Position, right_hand: Position) -> Position:
        available = self.wall_buffer.get_available_grid_spaces(beat)
        current_cell = (int(round(self.head_position[0])), int(round(self.head_position[1])))

        neutral_column = 1 if (float(left_hand[0]) + float(right_hand[0])) / 2.0 <= 1.5 else 2
        desired_column = current_cell[0]
        desired_row = current_cell[1]
        if beat - self.wall_buffer.last_dodge_influence > NEUTRAL_RETURN_BEATS:
            desired_column = neutral_column
        if beat - self.wall_buffer.last_duck_influence > NEUTRAL_RETURN_BEATS:
            desired_row = NEUTRAL_HEAD_ROW
        desired_cell = (desired_column, desired_row)

        chosen_cell = desired_cell
        influence_beat = float(beat)
        if available and desired_cell not in available:
            blocking = self.wall_buffer.blocking_walls(*desired_cell, current_beat=beat)
            if blocking:
                influence_beat = max(wall.end_beat for wall in blocking)
            fallback = [cell for cell in HEAD_FALLBACK_CELLS if cell in available]
            if fallback:
                chosen_cell = fallback[0]
            else:
                chosen_cell = min(available, key=lambda cell: _manhattan(cell, desired_cell))

        if chosen_cell[0] != current_cell[0]:
            self.wall_buffer.last_dodge_influence = influence_beat
        if chosen_cell[1] != current_cell[1]:
            self.wall_buffer.last_duck_influence = influence_beat

        return (float(chosen_cell[0]), float(chosen_cell[1]))

    def update_pose(
        self,
        beat: float,
        left_hand: Optional[Position] = None,
        right_hand: Optional[Position] = None,
    ) -> bool:
        """Move hands (and the head with them) and record a pose. Returns False for a duplicate pose.

        A swing is committed only once a later object closes its group, so `beat` may lie before
        the state's beat cursor. Such a pose keeps the head that was in effect at that beat and
        leaves the head and avoidance stamps of the present untouched.
        """
        beat = float(beat)
        retroactive = beat < self.beat_time
        new_left = left_hand if left_hand is not None else self.left_hand_position
        new_right = right_hand if right_hand is not None else self.right_hand_position
        if retroactive:
            new_head = self._head_at(beat)
        else:
            new_head = self._resolve_head(beat, new_left, new_right)
        new_pose = BotPose(beat=beat, left_hand=new_left, right_hand=new_right, head=new_head)
        self.beat_time = max(self.beat_time, beat)

        latest = self.latest_pose()
        if latest is not None and latest.is_same_as(new_pose):
            return False

        self.movement_history.append(new_pose)
        self.left_hand_position = new_left
        self.right_hand_position = new_right
        if not retroactive:
            self.head_position = new_head
        return True

    def _head_at(self, beat: float) -> Position:
        head = DEFAULT_HEAD
        for pose in self.get_all_movement_history():
            if pose.beat > beat:
                break
            head = pose.head
        return head

    def __str__(self) -> str:
        return (
            "BotState:\n"
            f"  Index: {self.index}\n"
            f"  BeatTime: {self.beat_time}\n"
            f"  LeftHandPosition: {self.left_hand_position}\n"
            f"  RightHandPosition: {self.right_hand_position}\n"
            f"  HeadPosition: {self.head_position}\n"
            f"  MovementHistory: {len(self.movement_history)} poses\n"
            f"  LeftSwings: {len(self.left_swings)}\n"
            f"  RightSwings: {len(self.right_swings)}\n"
            f"  Parent: {'Yes' if self.parent_index is not None else 'No'}\n"
            f"  Children: {len(self.child_indices)}"
        )


def _run_unit_tests() -> None:
    root = BotState.create_root()
    assert root.parent is None and root.index == 0

    root.update_pose(1.0, left_hand=(0.0, 1.0))
    child = root.fork()
    assert child.parent is root and root.children == [child]
    assert child.movement_history == []
    assert child.left_hand_position == (0.0, 1.0)

    child.update_pose(0.5, right_hand=(3.0, 2.0))
    history = child.get_all_movement_history()
    assert [pose.beat for pose in history] == [0.5, 1.0]
    assert len(root.get_all_movement_history()) == 1

    assert root.update_pose(1.0, left_hand=(0.0, 1.0)) is False
    assert math.isinf(root.wall_buffer.last_dodge_influence) or root.wall_buffer.last_dodge_influence >= 0.0


if __name__ == "__main__":
    _run_unit_tests()
    print("bot_state.py: ok")
