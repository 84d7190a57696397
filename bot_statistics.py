# -*- coding: utf-8 -*-
########################
# bot_statistics.py
########################
# Purpose:
# - Numeric reductions over a produced swing sequence.
# - Selectors turn swings into series (angle change, reposition, time between, size, EBPM).
# - Statistic methods reduce a series to one number (mean, median, mode, min, max, std dev).
#
# Design notes:
# - Pure functions over immutable swings. Empty input yields NaN from every statistic method.
# - Selector and method registries are read only mappings built once at import.
# - StatCacheKey is the structured key used by difficulty_analysis for its memo cache.
#
########################
# Interfaces:
# Public enums:
# - class HandResult(enum.Enum): LEFT | RIGHT | BOTH
# - class Selector(enum.Enum): ANGLE_CHANGE | REPOSITION | TIME_BETWEEN | SWING_SIZE | EBPM
# - class StatisticMethod(enum.Enum): MEAN | MEDIAN | MODE | MIN | MAX | STD_DEV
#
# Public dataclasses:
# - StatCacheKey(statistic: enum.Enum, hand: HandResult, selector: Optional[enum.Enum])
#
# Public functions:
# - angle_change_between_swings / reposition_between_swings / time_between_swings
#   swing_sizes / swing_ebpms: (swings) -> list[float]
# - select(selector: Selector, swings) -> list[float]
# - calculate(method: StatisticMethod, values) -> float
# - compute(selector: Selector, method: StatisticMethod, swings) -> float
#
########################
# Smoke Tests:
#   - python bot_statistics.py
########################

from __future__ import annotations

import enum
import math
import statistics
from collections import Counter
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, List, Mapping, Optional, Sequence

import parity
from swing_data import SwingData


class HandResult(enum.Enum):
    LEFT = "left"
    RIGHT = "right"
    BOTH = "both"


class Selector(enum.Enum):
    ANGLE_CHANGE = "angle_change"
    REPOSITION = "reposition"
    TIME_BETWEEN = "time_between"
    SWING_SIZE = "swing_size"
    EBPM = "ebpm"


class StatisticMethod(enum.Enum):
    MEAN = "mean"
    MEDIAN = "median"
    MODE = "mode"
    MIN = "min"
    MAX = "max"
    STD_DEV = "std_dev"


@dataclass(frozen=True)
class StatCacheKey:
    statistic: enum.Enum
    hand: HandResult
    selector: Optional[enum.Enum] = None


def angle_change_between_swings(swings: Sequence[SwingData]) -> List[float]:
    """Rotation change (degrees) from each swing's end to the next swing's start."""
    changes: List[float] = []
    for previous, current in zip(swings, swings[1:]):
        start_angle = parity.swing_rotation(current.start_frame.direction, current)
        end_angle = parity.swing_rotation(previous.end_frame.direction, previous)
        changes.append(abs(start_angle - end_angle))
    return changes


def reposition_between_swings(swings: Sequence[SwingData]) -> List[float]:
    return [
        math.hypot(
            float(current.start_frame.x) - float(previous.end_frame.x),
            float(current.start_frame.y) - float(previous.end_frame.y),
        )
        for previous, current in zip(swings, swings[1:])
    ]


def time_between_swings(swings: Sequence[SwingData]) -> List[float]:
    """Seconds from each swing's end to the next swing's start."""
    return [
        (float(current.start_frame.time_ms) - float(previous.end_frame.time_ms)) / 1000.0
        for previous, current in zip(swings, swings[1:])
    ]


def swing_sizes(swings: Sequence[SwingData]) -> List[float]:
    # A one cell swing still covers its own cell.
    return [
        math.hypot(
            float(swing.end_frame.x) - float(swing.start_frame.x),
            float(swing.end_frame.y) - float(swing.start_frame.y),
        )
        + 1.0
        for swing in swings
    ]


def swing_ebpms(swings: Sequence[SwingData]) -> List[float]:
    return [float(swing.ebpm) for swing in swings]


def _mean(values: Sequence[float]) -> float:
    return statistics.fmean(values)


def _median(values: Sequence[float]) -> float:
    return float(statistics.median(values))


def _mode(values: Sequence[float]) -> float:
    counts = Counter(values)
    best_count = max(counts.values())
    return float(min(value for value, count in counts.items() if count == best_count))


def _std_dev(values: Sequence[float]) -> float:
    return float(statistics.pstdev(values))


SELECTORS: Mapping[Selector, Callable[[Sequence[SwingData]], List[float]]] = MappingProxyType(
    {
        Selector.ANGLE_CHANGE: angle_change_between_swings,
        Selector.REPOSITION: reposition_between_swings,
        Selector.TIME_BETWEEN: time_between_swings,
        Selector.SWING_SIZE: swing_sizes,
        Selector.EBPM: swing_ebpms,
    }
)

STATISTIC_METHODS: Mapping[StatisticMethod, Callable[[Sequence[float]], float]] = MappingProxyType(
    {
        StatisticMethod.MEAN: _mean,
        StatisticMethod.MEDIAN: _median,
        StatisticMethod.MODE: _mode,
        StatisticMethod.MIN: lambda values: float(min(values)),
        StatisticMethod.MAX: lambda values: float(max(values)),
        StatisticMethod.STD_DEV: _std_dev,
    }
)


def select(selector: Selector, swings: Sequence[SwingData]) -> List[float]:
    return SELECTORS[Selector(selector)](list(swings))


def calculate(method: StatisticMethod, values: Sequence[float]) -> float:
    data = [float(value) for value in values]
    if not data:
        return math.nan
    return STATISTIC_METHODS[StatisticMethod(method)](data)


def compute(selector: Selector, method: StatisticMethod, swings: Sequence[SwingData]) -> float:
    return calculate(method, select(selector, swings))


def _run_unit_tests() -> None:
    assert math.isnan(calculate(StatisticMethod.MEAN, []))
    assert calculate(StatisticMethod.MEDIAN, [3.0, 1.0, 2.0, 10.0]) == 2.5
    assert calculate(StatisticMethod.MODE, [2.0, 1.0, 2.0, 1.0, 5.0]) == 1.0
    assert calculate(StatisticMethod.STD_DEV, [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]) == 2.0
    assert calculate(StatisticMethod.MAX, [1.0, -4.0]) == 1.0

    assert StatCacheKey(StatisticMethod.MEAN, HandResult.LEFT, Selector.EBPM) == StatCacheKey(
        StatisticMethod.MEAN, HandResult.LEFT, Selector.EBPM
    )
    assert select(Selector.EBPM, []) == []


if __name__ == "__main__":
    _run_unit_tests()
    print("bot_statistics.py: ok")
