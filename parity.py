# -*- coding: utf-8 -*-
########################
# parity.py
########################
# Purpose:
# - Parity (forehand/backhand) prediction and reset classification between two swings on one hand.
# - Rotation lookup tables: cut direction -> angle from neutral, per hand and parity.
#
# Design notes:
# - Pure functions over immutable tables. No state is read besides the arguments.
# - Angle from neutral: 0 degrees is a plain up/down swing; sign follows the wrist roll for the hand.
# - The context window argument is accepted for bomb aware checks but not consulted yet.
#
########################
# Interfaces:
# Public constants:
# - INITIAL_PARITY: Mapping[CutDirection, Parity]
#
# Public functions:
# - rotation(direction: CutDirection, parity: Parity, hand: Hand) -> float
# - swing_rotation(direction: CutDirection, swing: SwingData) -> float
# - opposite_parity(parity: Parity) -> Parity
# - initial_parity(direction: CutDirection) -> Parity
# - leading_direction(last_swing: SwingData, next_swing: SwingData) -> CutDirection
# - assess_parity(last_swing, next_swing, config, context_window=None) -> tuple[ResetType, Parity]
# - cut_direction_from_rotation(angle: float, hand: Hand, parity: Parity) -> CutDirection
#
########################

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Tuple

import directions
from config import AnalysisConfig
from map_models import CutDirection, Hand, Parity, ResetType
from swing_data import SwingData


def _table(angles: Sequence[float]) -> Mapping[CutDirection, float]:
    return MappingProxyType({CutDirection(index): float(angle) for index, angle in enumerate(angles)})


# Index order: UP, DOWN, LEFT, RIGHT, UP_LEFT, UP_RIGHT, DOWN_LEFT, DOWN_RIGHT, ANY
_RIGHT_FOREHAND = _table((-180, 0, -90, 90, -135, 135, -45, 45, 0))
_RIGHT_BACKHAND = _table((0, -180, 90, -90, 45, -45, 135, -135, 0))
_LEFT_FOREHAND = _table((-180, 0, 90, -90, 135, -135, 45, -45, 0))
_LEFT_BACKHAND = _table((0, -180, -90, 90, -45, 45, -135, 135, 0))

_ROTATION_TABLES: Mapping[Tuple[Hand, Parity], Mapping[CutDirection, float]] = MappingProxyType(
    {
        (Hand.RIGHT, Parity.FOREHAND): _RIGHT_FOREHAND,
        (Hand.RIGHT, Parity.BACKHAND): _RIGHT_BACKHAND,
        (Hand.LEFT, Parity.FOREHAND): _LEFT_FOREHAND,
        (Hand.LEFT, Parity.BACKHAND): _LEFT_BACKHAND,
    }
)

INITIAL_PARITY: Mapping[CutDirection, Parity] = MappingProxyType(
    {
        CutDirection.UP: Parity.BACKHAND,
        CutDirection.DOWN: Parity.FOREHAND,
        CutDirection.LEFT: Parity.FOREHAND,
        CutDirection.RIGHT: Parity.FOREHAND,
        CutDirection.UP_LEFT: Parity.BACKHAND,
        CutDirection.UP_RIGHT: Parity.BACKHAND,
        CutDirection.DOWN_LEFT: Parity.FOREHAND,
        CutDirection.DOWN_RIGHT: Parity.FOREHAND,
        CutDirection.ANY: Parity.FOREHAND,
    }
)


def _rotation_table(hand: Hand, parity: Parity) -> Mapping[CutDirection, float]:
    # Anything that is not a forehand reads the backhand table.
    table_parity = Parity.FOREHAND if parity == Parity.FOREHAND else Parity.BACKHAND
    return _ROTATION_TABLES[(Hand(hand), table_parity)]


def rotation(direction: CutDirection, parity: Parity, hand: Hand) -> float:
    return float(_rotation_table(hand, parity).get(CutDirection(direction), 0.0))


def swing_rotation(direction: CutDirection, swing: SwingData) -> float:
    return rotation(direction, swing.parity, swing.hand)


def opposite_parity(parity: Parity) -> Parity:
    return Parity.BACKHAND if parity == Parity.FOREHAND else Parity.FOREHAND


def initial_parity(direction: CutDirection) -> Parity:
    return INITIAL_PARITY[CutDirection(direction)]


def leading_direction(last_swing: SwingData, next_swing: SwingData) -> CutDirection:
    """First arrowed direction of the next swing, or the note-to-note direction for all-dot swings."""
    for note in next_swing.notes:
        if note.direction != CutDirection.ANY:
            return CutDirection(note.direction)
    if last_swing.notes and next_swing.notes:
        return directions.direction_between(last_swing.notes[-1], next_swing.notes[0])
    return next_swing.start_frame.direction


def assess_parity(
    last_swing: SwingData,
    next_swing: SwingData,
    config: AnalysisConfig,
    context_window: Optional[Sequence[object]] = None,
) -> Tuple[ResetType, Parity]:
    alternated = opposite_parity(last_swing.parity)
    same = Parity.FOREHAND if last_swing.parity == Parity.FOREHAND else Parity.BACKHAND

    if next_swing.notes and all(note.direction == CutDirection.ANY for note in next_swing.notes):
        return (ResetType.NONE, alternated)

    last_angle = rotation(last_swing.end_frame.direction, same, last_swing.hand)
    next_angle = rotation(leading_direction(last_swing, next_swing), alternated, last_swing.hand)
    angle_change = last_angle - next_angle

    if abs(angle_change) > float(config.angle_tolerance) or abs(next_angle) > float(config.angle_limit):
        return (ResetType.ANGLE, same)
    return (ResetType.NONE, alternated)


def cut_direction_from_rotation(angle: float, hand: Hand, parity: Parity) -> CutDirection:
    table = _rotation_table(hand, parity)
    best_direction = CutDirection.UP
    best_error = None
    for direction, table_angle in table.items():
        error = abs(table_angle - float(angle))
        if best_error is None or error < best_error:
            best_error = error
            best_direction = direction
    return best_direction


def _run_unit_tests() -> None:
    assert rotation(CutDirection.UP, Parity.FOREHAND, Hand.RIGHT) == -180.0
    assert rotation(CutDirection.DOWN_RIGHT, Parity.BACKHAND, Hand.LEFT) == 135.0
    assert initial_parity(CutDirection.UP) == Parity.BACKHAND
    assert opposite_parity(Parity.UNDETERMINED) == Parity.FOREHAND
    assert cut_direction_from_rotation(-170.0, Hand.RIGHT, Parity.FOREHAND) == CutDirection.UP


if __name__ == "__main__":
    _run_unit_tests()
    print("parity.py: ok")
