# -*- coding: utf-8 -*-
########################
# directions.py
########################
# Purpose:
# - Immutable cut direction lookup tables and the small amount of 2D direction math the swing
#   builder and the parity assessor share.
#
# Design notes:
# - Tables are tuples or MappingProxyType views built at import time. Never mutate them.
# - Grid coordinates: x grows to the right (0..3), y grows upward (0..2).
# - Ties are resolved by table order so results are deterministic.
#
########################
# Interfaces:
# Public constants:
# - DIRECTION_VECTORS: tuple[(dx, dy)] indexed by CutDirection (UP..DOWN_RIGHT)
# - VECTOR_TO_DIRECTION: Mapping[(dx, dy), CutDirection]
# - OPPOSING_DIRECTION: Mapping[CutDirection, CutDirection]
# - COMPASS_ORDER: tuple[CutDirection] clockwise from UP
#
# Public functions:
# - opposite(direction) -> CutDirection
# - is_within_intervals(first, second, intervals) -> bool
# - direction_from_vector(dx, dy) -> CutDirection
# - direction_between(first, last) -> CutDirection
# - nearest_diagonal(dx, dy) -> CutDirection
# - midway_to(start, target, *, toward_target) -> CutDirection
#
########################

from __future__ import annotations

import math
from types import MappingProxyType
from typing import Mapping, Tuple

from map_models import CutDirection


Vector = Tuple[float, float]


DIRECTION_VECTORS: Tuple[Tuple[int, int], ...] = (
    (0, 1),  # up
    (0, -1),  # down
    (-1, 0),  # left
    (1, 0),  # right
    (-1, 1),  # up left
    (1, 1),  # up right
    (-1, -1),  # down left
    (1, -1),  # down right
)

VECTOR_TO_DIRECTION: Mapping[Tuple[int, int], CutDirection] = MappingProxyType(
    {
        (0, 1): CutDirection.UP,
        (0, -1): CutDirection.DOWN,
        (-1, 0): CutDirection.LEFT,
        (1, 0): CutDirection.RIGHT,
        (-1, 1): CutDirection.UP_LEFT,
        (1, 1): CutDirection.UP_RIGHT,
        (-1, -1): CutDirection.DOWN_LEFT,
        (1, -1): CutDirection.DOWN_RIGHT,
        (0, 0): CutDirection.ANY,
    }
)

OPPOSING_DIRECTION: Mapping[CutDirection, CutDirection] = MappingProxyType(
    {
        CutDirection.UP: CutDirection.DOWN,
        CutDirection.DOWN: CutDirection.UP,
        CutDirection.LEFT: CutDirection.RIGHT,
        CutDirection.RIGHT: CutDirection.LEFT,
        CutDirection.UP_LEFT: CutDirection.DOWN_RIGHT,
        CutDirection.UP_RIGHT: CutDirection.DOWN_LEFT,
        CutDirection.DOWN_LEFT: CutDirection.UP_RIGHT,
        CutDirection.DOWN_RIGHT: CutDirection.UP_LEFT,
        CutDirection.ANY: CutDirection.ANY,
    }
)

COMPASS_ORDER: Tuple[CutDirection, ...] = (
    CutDirection.UP,
    CutDirection.UP_RIGHT,
    CutDirection.RIGHT,
    CutDirection.DOWN_RIGHT,
    CutDirection.DOWN,
    CutDirection.DOWN_LEFT,
    CutDirection.LEFT,
    CutDirection.UP_LEFT,
)

_COMPASS_INDEX: Mapping[CutDirection, int] = MappingProxyType(
    {direction: index for index, direction in enumerate(COMPASS_ORDER)}
)

_DIAGONALS: Tuple[Tuple[int, int], ...] = (
    (1, 1),  # top right
    (-1, 1),  # top left
    (-1, -1),  # bottom left
    (1, -1),  # bottom right
)


def opposite(direction: CutDirection) -> CutDirection:
    return OPPOSING_DIRECTION[CutDirection(direction)]


def direction_vector(direction: CutDirection) -> Tuple[int, int]:
    """Unnormalized vector for an arrowed direction. ANY has no vector and maps to (0, 0)."""
    if direction == CutDirection.ANY:
        return (0, 0)
    return DIRECTION_VECTORS[int(direction)]


def normalize(vector: Vector) -> Vector:
    length = math.hypot(float(vector[0]), float(vector[1]))
    if length == 0.0:
        return (0.0, 0.0)
    return (float(vector[0]) / length, float(vector[1]) / length)


def dot(first: Vector, second: Vector) -> float:
    return float(first[0]) * float(second[0]) + float(first[1]) * float(second[1])


def compass_distance(first: CutDirection, second: CutDirection) -> int:
    steps = abs(_COMPASS_INDEX[first] - _COMPASS_INDEX[second]) % len(COMPASS_ORDER)
    return min(steps, len(COMPASS_ORDER) - steps)


def is_within_intervals(first: CutDirection, second: CutDirection, intervals: int) -> bool:
    """True when two directions are at most `intervals` compass notches apart. ANY matches everything."""
    if first == CutDirection.ANY or second == CutDirection.ANY:
        return True
    return compass_distance(first, second) <= int(intervals)


def direction_from_vector(dx: float, dy: float) -> CutDirection:
    if float(dx) == 0.0 and float(dy) == 0.0:
        return CutDirection.ANY

    unit = normalize((dx, dy))
    best_vector = DIRECTION_VECTORS[0]
    best_score = -math.inf
    for candidate in DIRECTION_VECTORS:
        score = dot(unit, normalize(candidate))
        if score > best_score:
            best_score = score
            best_vector = candidate
    return VECTOR_TO_DIRECTION[best_vector]


def direction_between(first: object, last: object) -> CutDirection:
    """Cut direction of the motion from `first` to `last` (anything with grid x and y)."""
    dx = float(getattr(last, "x")) - float(getattr(first, "x"))
    dy = float(getattr(last, "y")) - float(getattr(first, "y"))
    return direction_from_vector(dx, dy)


def nearest_diagonal(dx: float, dy: float) -> CutDirection:
    closest = _DIAGONALS[0]
    max_dot = -math.inf
    for diagonal in _DIAGONALS:
        score = float(dx) * diagonal[0] + float(dy) * diagonal[1]
        if score > max_dot:
            max_dot = score
            closest = diagonal
    return VECTOR_TO_DIRECTION[closest]


def midway_to(start: CutDirection, target: CutDirection, *, toward_target: bool) -> CutDirection:
    """Direction halfway along the shorter compass arc from start to target.

    An odd number of notches cannot be halved exactly: `toward_target` rounds the step toward the
    target, otherwise toward the start. Exact opposites rotate clockwise.
    """
    if start == CutDirection.ANY:
        return CutDirection(target)
    if target == CutDirection.ANY:
        return CutDirection(start)

    start_index = _COMPASS_INDEX[start]
    difference = (_COMPASS_INDEX[target] - start_index) % len(COMPASS_ORDER)
    if difference > len(COMPASS_ORDER) // 2:
        difference -= len(COMPASS_ORDER)
    if difference == 0:
        return CutDirection(start)

    half_steps = abs(difference) / 2.0
    steps = math.ceil(half_steps) if toward_target else math.floor(half_steps)
    if difference < 0:
        steps = -steps
    return COMPASS_ORDER[(start_index + steps) % len(COMPASS_ORDER)]


def _run_unit_tests() -> None:
    assert opposite(CutDirection.UP_LEFT) == CutDirection.DOWN_RIGHT
    assert opposite(CutDirection.ANY) == CutDirection.ANY

    assert is_within_intervals(CutDirection.UP, CutDirection.UP_RIGHT, 1)
    assert is_within_intervals(CutDirection.UP, CutDirection.UP_LEFT, 1)
    assert not is_within_intervals(CutDirection.UP, CutDirection.RIGHT, 1)
    assert is_within_intervals(CutDirection.ANY, CutDirection.DOWN, 0)

    assert direction_from_vector(0, 0) == CutDirection.ANY
    assert direction_from_vector(3, 1) == CutDirection.RIGHT
    assert direction_from_vector(2, 1) == CutDirection.UP_RIGHT
    assert direction_from_vector(-3, -3) == CutDirection.DOWN_LEFT

    assert nearest_diagonal(1, 2) == CutDirection.UP_RIGHT
    assert nearest_diagonal(-2, -1) == CutDirection.DOWN_LEFT

    assert midway_to(CutDirection.UP, CutDirection.RIGHT, toward_target=False) == CutDirection.UP_RIGHT
    assert midway_to(CutDirection.UP, CutDirection.UP_RIGHT, toward_target=False) == CutDirection.UP
    assert midway_to(CutDirection.UP, CutDirection.UP_RIGHT, toward_target=True) == CutDirection.UP_RIGHT
    assert midway_to(CutDirection.UP, CutDirection.LEFT, toward_target=True) == CutDirection.UP_LEFT


if __name__ == "__main__":
    _run_unit_tests()
    print("directions.py: ok")
