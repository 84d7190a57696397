# -*- coding: utf-8 -*-
########################
# difficulty_analysis.py
########################
# Purpose:
# - Per difficulty statistics over one finished simulation: density, speed, handedness, swing type
#   mix, doubles, spacing, angle change and reset counts.
#
# Design notes:
# - Results are memoized per StatCacheKey. The cache is guarded by a lock; values are computed
#   outside the lock, so two threads may compute the same value once each.
# - BLANK connector swings are excluded from every statistic.
# - "Both hands" SPS is the sum of the per hand values. Other both hand figures pool or average.
#
########################
# Interfaces:
# Public enums:
# - class Metric(enum.Enum)
#
# Public classes:
# - class DifficultyAnalysis(map_objects: MapObjects, state: BotState)
#   - swings(hand: HandResult) -> list[SwingData]
#   - get_nps(hand) / get_sps(hand) / get_average_ebpm(hand) / get_handedness(hand)
#   - get_handedness_pair() -> tuple[float, float]  # (right, left)
#   - get_swing_type_percent(swing_type, hand) / get_doubles_percent()
#   - get_average_spacing(hand) / get_average_angle_change(hand)
#   - get_reset_count(reset_type=ResetType.ANGLE) -> int
#   - get_statistic(selector, method, hand) -> float
#   - clear_cache() -> None
#   - summary() -> str
#
########################
# Smoke Tests:
#   - python difficulty_analysis.py
########################

from __future__ import annotations

import enum
import logging
import threading
from typing import Callable, Dict, List, Tuple

import bot_statistics
from bot_state import BotState
from bot_statistics import HandResult, Selector, StatCacheKey, StatisticMethod
from map_models import Hand, MapObjects, NoteEvent, ResetType, SwingType
from swing_data import SwingData


logger = logging.getLogger(__name__)


DOUBLES_THRESHOLD_MS = 0.05


class Metric(enum.Enum):
    NPS = "nps"
    SPS = "sps"
    AVERAGE_EBPM = "average_ebpm"
    HANDEDNESS = "handedness"
    SWING_TYPE_PERCENT = "swing_type_percent"
    DOUBLES_PERCENT = "doubles_percent"
    AVERAGE_SPACING = "average_spacing"
    AVERAGE_ANGLE_CHANGE = "average_angle_change"


def _mean_or_zero(values: List[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def _percent(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return float(part) / float(whole) * 100.0


class DifficultyAnalysis:
    def __init__(self, map_objects: MapObjects, state: BotState) -> None:
        if map_objects is None:
            raise ValueError("map_objects is required")
        if state is None:
            raise ValueError("state is required")

        self._map_objects = map_objects
        self._state = state
        self._cache: Dict[StatCacheKey, float] = {}
        self._cache_lock = threading.Lock()

    @property
    def state(self) -> BotState:
        return self._state

    @property
    def map_objects(self) -> MapObjects:
        return self._map_objects

    def _cached(self, key: StatCacheKey, compute: Callable[[], float]) -> float:
        with self._cache_lock:
            if key in self._cache:
                return self._cache[key]

        value = float(compute())
        logger.debug("Computed %s (%s) = %.4f", key.statistic.name, key.hand.value, value)

        with self._cache_lock:
            return self._cache.setdefault(key, value)

    def clear_cache(self) -> None:
        with self._cache_lock:
            self._cache.clear()

    def swings(self, hand: HandResult) -> List[SwingData]:
        if hand == HandResult.LEFT:
            return self._state.get_all_swings(Hand.LEFT, include_blanks=False)
        if hand == HandResult.RIGHT:
            return self._state.get_all_swings(Hand.RIGHT, include_blanks=False)
        return self._state.get_joint_swing_data(include_blanks=False)

    def _notes(self, hand: HandResult) -> List[NoteEvent]:
        notes: List[NoteEvent] = list(self._map_objects.notes) + list(self._map_objects.chains)
        if hand == HandResult.LEFT:
            notes = [note for note in notes if note.hand == Hand.LEFT]
        elif hand == HandResult.RIGHT:
            notes = [note for note in notes if note.hand == Hand.RIGHT]
        notes.sort(key=lambda note: float(note.time_ms))
        return notes

    def get_nps(self, hand: HandResult = HandResult.BOTH) -> float:
        def compute() -> float:
            notes = self._notes(hand)
            if not notes:
                return 0.0
            duration_seconds = (float(notes[-1].time_ms) - float(notes[0].time_ms)) / 1000.0
            return len(notes) / duration_seconds if duration_seconds > 0 else 0.0

        return self._cached(StatCacheKey(Metric.NPS, hand), compute)

    def _hand_sps(self, hand: HandResult) -> float:
        hand_swings = self.swings(hand)
        if len(hand_swings) <= 1:
            return 0.0
        duration_seconds = (
            float(hand_swings[-1].end_frame.time_ms) - float(hand_swings[0].start_frame.time_ms)
        ) / 1000.0
        return len(hand_swings) / duration_seconds if duration_seconds > 0 else 0.0

    def get_sps(self, hand: HandResult = HandResult.BOTH) -> float:
        def compute() -> float:
            if hand == HandResult.BOTH:
                return self._hand_sps(HandResult.LEFT) + self._hand_sps(HandResult.RIGHT)
            return self._hand_sps(hand)

        return self._cached(StatCacheKey(Metric.SPS, hand), compute)

    def get_average_ebpm(self, hand: HandResult = HandResult.BOTH) -> float:
        def compute() -> float:
            return _mean_or_zero([float(swing.ebpm) for swing in self.swings(hand)])

        return self._cached(StatCacheKey(Metric.AVERAGE_EBPM, hand), compute)

    def get_handedness(self, hand: HandResult = HandResult.RIGHT) -> float:
        """Share of all swings (percent) played by a hand. BOTH reports the right hand."""

        def compute() -> float:
            left_count = len(self.swings(HandResult.LEFT))
            right_count = len(self.swings(HandResult.RIGHT))
            own_count = left_count if hand == HandResult.LEFT else right_count
            return _percent(own_count, left_count + right_count)

        return self._cached(StatCacheKey(Metric.HANDEDNESS, hand), compute)

    def get_handedness_pair(self) -> Tuple[float, float]:
        return (self.get_handedness(HandResult.RIGHT), self.get_handedness(HandResult.LEFT))

    def get_swing_type_percent(
        self,
        swing_type: SwingType = SwingType.NORMAL,
        hand: HandResult = HandResult.BOTH,
    ) -> float:
        def compute() -> float:
            hand_swings = self.swings(hand)
            matching = sum(1 for swing in hand_swings if swing.swing_type == swing_type)
            return _percent(matching, len(hand_swings))

        return self._cached(StatCacheKey(Metric.SWING_TYPE_PERCENT, hand, SwingType(swing_type)), compute)

    def get_doubles_percent(self) -> float:
        def compute() -> float:
            left_swings = [swing for swing in self.swings(HandResult.LEFT) if swing.notes]
            right_swings = [swing for swing in self.swings(HandResult.RIGHT) if swing.notes]
            right_starts = [float(swing.notes[0].time_ms) for swing in right_swings]
            matched = sum(
                1
                for swing in left_swings
                if any(abs(float(swing.notes[0].time_ms) - start) <= DOUBLES_THRESHOLD_MS for start in right_starts)
            )
            return _percent(matched, len(left_swings) + len(right_swings))

        return self._cached(StatCacheKey(Metric.DOUBLES_PERCENT, HandResult.BOTH), compute)

    def _pooled(self, hand: HandResult, selector: Selector) -> List[float]:
        if hand == HandResult.BOTH:
            return bot_statistics.select(selector, self.swings(HandResult.LEFT)) + bot_statistics.select(
                selector, self.swings(HandResult.RIGHT)
            )
        return bot_statistics.select(selector, self.swings(hand))

    def get_average_spacing(self, hand: HandResult = HandResult.RIGHT) -> float:
        def compute() -> float:
            return _mean_or_zero(self._pooled(hand, Selector.REPOSITION))

        return self._cached(StatCacheKey(Metric.AVERAGE_SPACING, hand), compute)

    def get_average_angle_change(self, hand: HandResult = HandResult.RIGHT) -> float:
        def compute() -> float:
            left = _mean_or_zero(bot_statistics.select(Selector.ANGLE_CHANGE, self.swings(HandResult.LEFT)))
            right = _mean_or_zero(bot_statistics.select(Selector.ANGLE_CHANGE, self.swings(HandResult.RIGHT)))
            if hand == HandResult.LEFT:
                return left
            if hand == HandResult.RIGHT:
                return right
            return (left + right) / 2.0

        return self._cached(StatCacheKey(Metric.AVERAGE_ANGLE_CHANGE, hand), compute)

    def get_reset_count(self, reset_type: ResetType = ResetType.ANGLE) -> int:
        joint = self.swings(HandResult.BOTH)
        if len(joint) <= 1:
            return 0
        return sum(1 for swing in joint if swing.reset_type == reset_type)

    def get_statistic(
        self,
        selector: Selector,
        method: StatisticMethod,
        hand: HandResult = HandResult.BOTH,
    ) -> float:
        """Any selector reduced by any statistic method. Empty series give NaN."""

        def compute() -> float:
            return bot_statistics.calculate(method, self._pooled(hand, selector))

        return self._cached(StatCacheKey(StatisticMethod(method), hand, Selector(selector)), compute)

    def summary(self) -> str:
        lines = [
            "-----------------------",
            "Total Swings:",
            f" - Left Hand: {len(self.swings(HandResult.LEFT))}",
            f" - Right Hand: {len(self.swings(HandResult.RIGHT))}",
            "Potential Resets:",
            f" - Angle Resets: {self.get_reset_count(ResetType.ANGLE)}",
            f" - Bomb Resets: {self.get_reset_count(ResetType.BOMB)}",
            "Average Swings per Second (SPS):",
            f" - Total: {self.get_sps():.2f}",
            f" - Left Hand: {self.get_sps(HandResult.LEFT):.2f}",
            f" - Right Hand: {self.get_sps(HandResult.RIGHT):.2f}",
            "Average Effective BPM:",
            f" - Total: {self.get_average_ebpm():.2f}",
            f" - Left Hand: {self.get_average_ebpm(HandResult.LEFT):.2f}",
            f" - Right Hand: {self.get_average_ebpm(HandResult.RIGHT):.2f}",
            "Handedness %:",
            f" - Right Hand: {self.get_handedness(HandResult.RIGHT):.2f}%",
            f" - Left Hand: {self.get_handedness(HandResult.LEFT):.2f}%",
            "Percentage of Swing Types:",
        ]
        for swing_type in SwingType:
            if swing_type == SwingType.BLANK:
                continue
            lines.append(f" - {swing_type.name}: {self.get_swing_type_percent(swing_type):.2f}%")
        lines.append("-----------------------")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.summary()


def _run_unit_tests() -> None:
    import map_processor
    from map_models import CutDirection

    def note(beat: float, direction: CutDirection, hand: Hand) -> NoteEvent:
        x = 1 if hand == Hand.LEFT else 2
        return NoteEvent(beat=beat, x=x, y=0, hand=hand, direction=direction, time_ms=beat * 500.0)

    objects = MapObjects(
        notes=[
            note(0.0, CutDirection.DOWN, Hand.LEFT),
            note(0.0, CutDirection.DOWN, Hand.RIGHT),
            note(1.0, CutDirection.UP, Hand.LEFT),
            note(1.0, CutDirection.UP, Hand.RIGHT),
            note(2.0, CutDirection.DOWN, Hand.RIGHT),
        ]
    )
    analysis = DifficultyAnalysis(objects, map_processor.run(objects))

    assert abs(analysis.get_nps() - 5.0) < 1e-9
    assert abs(analysis.get_handedness(HandResult.RIGHT) - 60.0) < 1e-9
    assert abs(analysis.get_sps() - (analysis.get_sps(HandResult.LEFT) + analysis.get_sps(HandResult.RIGHT))) < 1e-9
    assert abs(analysis.get_doubles_percent() - 40.0) < 1e-9
    assert analysis.get_swing_type_percent(SwingType.NORMAL) == 100.0
    assert analysis.get_reset_count() == 0
    assert analysis.get_statistic(Selector.EBPM, StatisticMethod.MAX) == 60.0

    try:
        DifficultyAnalysis(objects, None)  # type: ignore[arg-type]
    except ValueError:
        pass
    else:
        raise AssertionError("Expected ValueError for a missing state")


if __name__ == "__main__":
    _run_unit_tests()
    print("difficulty_analysis.py: ok")
