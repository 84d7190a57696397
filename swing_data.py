# -*- coding: utf-8 -*-
########################
# swing_data.py
########################
# Purpose:
# - Immutable swing records (SwingData) and their motion frames (SwingFrame).
# - SwingDataBuilder: staged construction of a swing from a finalized note group, including the
#   motion path synthesis and path reversal.
#
# Design notes:
# - SwingData is frozen and always has at least one frame. Building a swing without frames is a
#   programmer error and raises ValueError.
# - build() consumes the builder. Any later mutation raises RuntimeError. Use snapshot() for an
#   intermediate immutable view (the orchestrator needs one for parity assessment).
# - Path frames follow the group's processing order, which is not always strict beat order.
#
########################
# Interfaces:
# Public dataclasses:
# - SwingFrame(beat: float, x: float, y: float, direction: CutDirection, time_ms: float)
# - SwingData(hand, parity, swing_type, reset_type, frames, notes, ebpm)
#   - start_frame / end_frame / is_reset properties
#
# Public classes:
# - class SwingDataBuilder
#   - with_hand / with_parity / with_swing_type / with_reset_type / with_ebpm / with_notes / with_frames
#   - path_swing(last_swing: Optional[SwingData] = None) -> SwingDataBuilder
#   - reverse_path() -> SwingDataBuilder
#   - snapshot() -> SwingData
#   - build() -> SwingData
#
# Public functions:
# - frame_from_note(note: NoteEvent) -> SwingFrame
# - flip_frames(frames: Sequence[SwingFrame]) -> list[SwingFrame]
#
########################

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import directions
import swing_utils
from map_models import ChainEvent, CutDirection, Hand, NoteEvent, Parity, ResetType, SwingType


@dataclass(frozen=True)
class SwingFrame:
    beat: float
    x: float
    y: float
    direction: CutDirection = CutDirection.ANY
    time_ms: float = 0.0


@dataclass(frozen=True)
class SwingData:
    hand: Hand
    parity: Parity
    swing_type: SwingType
    reset_type: ResetType
    frames: Tuple[SwingFrame, ...]
    notes: Tuple[NoteEvent, ...]
    ebpm: float = 0.0

    def __post_init__(self) -> None:
        if not self.frames:
            raise ValueError("Swing frames cannot be empty")

    @property
    def start_frame(self) -> SwingFrame:
        return self.frames[0]

    @property
    def end_frame(self) -> SwingFrame:
        return self.frames[-1]

    @property
    def is_reset(self) -> bool:
        return self.reset_type != ResetType.NONE

    def __str__(self) -> str:
        frames_text = ", ".join(
            f"({frame.beat} beats, {frame.x}x, {frame.y}y, {frame.direction.name})" for frame in self.frames
        )
        return (
            f"Swing at beat {self.start_frame.beat} | {self.hand.name} | {self.parity.name} | "
            f"{self.swing_type.name} | reset {self.reset_type.name} | EBPM {self.ebpm:.2f} | "
            f"{len(self.notes)} note(s) | frames: {frames_text}"
        )


def frame_from_note(note: NoteEvent) -> SwingFrame:
    return SwingFrame(
        beat=float(note.beat),
        x=float(note.x),
        y=float(note.y),
        direction=CutDirection(note.direction),
        time_ms=float(note.time_ms),
    )


def flip_frames(frames: Sequence[SwingFrame]) -> List[SwingFrame]:
    """Mirror positions end to end and flip every direction. Beat and time stay with the index."""
    frame_count = len(frames)
    flipped: List[SwingFrame] = []
    for index, original in enumerate(frames):
        mirror = frames[frame_count - index - 1]
        flipped.append(
            SwingFrame(
                beat=original.beat,
                x=mirror.x,
                y=mirror.y,
                direction=directions.opposite(original.direction),
                time_ms=original.time_ms,
            )
        )
    return flipped


class SwingDataBuilder:
    def __init__(self) -> None:
        self._hand = Hand.LEFT
        self._parity = Parity.UNDETERMINED
        self._swing_type = SwingType.BLANK
        self._reset_type = ResetType.NONE
        self._frames: List[SwingFrame] = []
        self._notes: List[NoteEvent] = []
        self._ebpm = 0.0
        self._consumed = False

    def _ensure_open(self) -> None:
        if self._consumed:
            raise RuntimeError("SwingDataBuilder was already consumed by build()")

    def with_hand(self, hand: Hand) -> "SwingDataBuilder":
        self._ensure_open()
        self._hand = Hand(hand)
        return self

    def with_parity(self, parity: Parity) -> "SwingDataBuilder":
        self._ensure_open()
        self._parity = Parity(parity)
        return self

    def with_swing_type(self, swing_type: SwingType) -> "SwingDataBuilder":
        self._ensure_open()
        self._swing_type = SwingType(swing_type)
        return self

    def with_reset_type(self, reset_type: ResetType) -> "SwingDataBuilder":
        self._ensure_open()
        self._reset_type = ResetType(reset_type)
        return self

    def with_ebpm(self, ebpm: float) -> "SwingDataBuilder":
        self._ensure_open()
        self._ebpm = float(ebpm)
        return self

    def with_notes(self, notes: Optional[Sequence[NoteEvent]]) -> "SwingDataBuilder":
        self._ensure_open()
        self._notes = list(notes or [])
        return self

    def with_frames(self, frames: Optional[Sequence[SwingFrame]]) -> "SwingDataBuilder":
        self._ensure_open()
        self._frames = list(frames or [])
        return self

    def reverse_path(self) -> "SwingDataBuilder":
        self._ensure_open()
        self._frames = flip_frames(self._frames)
        self._notes.reverse()
        return self

    def path_swing(self, last_swing: Optional[SwingData] = None) -> "SwingDataBuilder":
        """Order the notes and synthesize one frame per note (two per chain)."""
        self._ensure_open()
        sorted_groups = swing_utils.sort_notes(self._notes, last_swing)
        self._notes = swing_utils.flatten(sorted_groups)

        if self._try_path_snapped_window():
            return self

        new_frames: List[SwingFrame] = []
        previous_note: Optional[NoteEvent] = None
        for group_index, notes_this_snap in enumerate(sorted_groups):
            next_note: Optional[NoteEvent] = None
            if group_index + 1 < len(sorted_groups):
                next_note = sorted_groups[group_index + 1][0]

            all_dots_this_snap = all(note.direction == CutDirection.ANY for note in notes_this_snap)
            for note_index, current_note in enumerate(notes_this_snap):
                if len(notes_this_snap) > note_index + 1:
                    next_note = notes_this_snap[note_index + 1]

                direction = CutDirection(current_note.direction)
                if direction == CutDirection.ANY:
                    if note_index == 0:
                        reference_note = previous_note or next_note or current_note
                    else:
                        reference_note = notes_this_snap[note_index - 1]

                    if group_index == 0 and all_dots_this_snap and len(sorted_groups) > 1:
                        direction = directions.direction_between(current_note, next_note or current_note)
                    elif previous_note is None and group_index == 0:
                        direction = directions.direction_between(current_note, reference_note)
                    else:
                        direction = directions.direction_between(reference_note, current_note)

                    if len(self._notes) == 1 and last_swing is not None:
                        direction = swing_utils.dot_cut_direction(
                            last_swing,
                            self._notes,
                            self._reset_type != ResetType.NONE,
                        )

                new_frames.append(
                    SwingFrame(
                        beat=float(current_note.beat),
                        x=float(current_note.x),
                        y=float(current_note.y),
                        direction=direction,
                        time_ms=float(current_note.time_ms),
                    )
                )
                previous_note = current_note

                if isinstance(current_note, ChainEvent):
                    new_frames.append(
                        SwingFrame(
                            beat=float(current_note.tail_beat),
                            x=float(current_note.tail_x),
                            y=float(current_note.tail_y),
                            direction=CutDirection(current_note.direction),
                            time_ms=float(current_note.tail_time_ms),
                        )
                    )

        self._frames = new_frames
        return self

    def _try_path_snapped_window(self) -> bool:
        # Two notes on one snap, a knight's move apart: swing through both on the nearest diagonal.
        if len(self._notes) != 2:
            return False
        first, second = self._notes
        if round(float(first.beat), swing_utils.SNAP_DECIMALS) != round(float(second.beat), swing_utils.SNAP_DECIMALS):
            return False

        horizontal = abs(int(second.x) - int(first.x))
        vertical = abs(int(second.y) - int(first.y))
        if (horizontal, vertical) not in ((1, 2), (2, 1)):
            return False

        diagonal = directions.nearest_diagonal(int(second.x) - int(first.x), int(second.y) - int(first.y))
        self._frames = [
            SwingFrame(
                beat=float(note.beat),
                x=float(note.x),
                y=float(note.y),
                direction=diagonal,
                time_ms=float(note.time_ms),
            )
            for note in self._notes
        ]
        return True

    def snapshot(self) -> SwingData:
        return SwingData(
            hand=self._hand,
            parity=self._parity,
            swing_type=self._swing_type,
            reset_type=self._reset_type,
            frames=tuple(self._frames),
            notes=tuple(self._notes),
            ebpm=self._ebpm,
        )

    def build(self) -> SwingData:
        self._ensure_open()
        swing = self.snapshot()
        self._consumed = True
        self._frames = []
        self._notes = []
        return swing


def _run_unit_tests() -> None:
    note = NoteEvent(beat=1.0, x=2, y=0, hand=Hand.RIGHT, direction=CutDirection.DOWN, time_ms=500.0)
    builder = SwingDataBuilder().with_hand(Hand.RIGHT).with_notes([note]).path_swing()
    swing = builder.build()
    assert len(swing.frames) == 1
    assert swing.start_frame == frame_from_note(note)

    try:
        builder.with_parity(Parity.FOREHAND)
    except RuntimeError:
        pass
    else:
        raise AssertionError("Expected RuntimeError after build()")

    try:
        SwingDataBuilder().build()
    except ValueError:
        pass
    else:
        raise AssertionError("Expected ValueError for a swing without frames")

    frames = [
        SwingFrame(beat=0.0, x=0.0, y=0.0, direction=CutDirection.DOWN),
        SwingFrame(beat=0.5, x=1.0, y=2.0, direction=CutDirection.ANY),
    ]
    assert flip_frames(flip_frames(frames)) == frames


if __name__ == "__main__":
    _run_unit_tests()
    print("swing_data.py: ok")
