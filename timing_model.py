# -*- coding: utf-8 -*-
########################
# timing_model.py
########################
# Purpose:
# - Single source of truth for converting beat time into real time.
# - Fills the derived real time (time_ms) of already parsed map objects.
# - Computes the effective BPM between two swing boundaries.
#
# Design notes:
# - No file parsing here. BPM segments arrive already parsed as (start_beat, bpm) pairs.
# - Keep this module pure and deterministic.
# - A non-positive BPM is a configuration error and is rejected immediately.
#
########################
# Interfaces:
# Public classes:
# - class BpmContext
#   - __init__(bpm_segments: Sequence[tuple[float, float]], offset_seconds: float = 0.0)
#   - from_bpm(bpm: float, offset_seconds: float = 0.0) -> BpmContext
#   - to_real_time(beat: float) -> float  # seconds
#   - beats_to_seconds(start_beat: float, end_beat: float) -> float
#
# Public functions:
# - normalize_map_objects(map_objects: MapObjects, bpm_context: BpmContext) -> MapObjects
# - swing_ebpm(start_ms: float, end_ms: float) -> float
#
# Inputs:
# - BPM segments and song offset from the external chart parser.
#
# Outputs:
# - MapObjects whose time_ms (and tail_time_ms) fields are populated.
#
########################

from __future__ import annotations

import dataclasses
from typing import List, Sequence, Tuple

from map_models import ArcEvent, ChainEvent, MapObjects


class BpmContext:
    def __init__(self, bpm_segments: Sequence[Tuple[float, float]], offset_seconds: float = 0.0) -> None:
        segments = [(float(start_beat), float(bpm)) for start_beat, bpm in bpm_segments] or [(0.0, 120.0)]
        segments.sort(key=lambda segment: segment[0])
        for _start_beat, bpm in segments:
            if bpm <= 0.0:
                raise ValueError(f"Invalid BPM value (must be > 0): {bpm!r}")

        self._segments = segments
        self._offset_seconds = float(offset_seconds)

        self._cumulative_seconds_at_start: List[float] = [0.0]
        for index in range(1, len(segments)):
            prev_start_beat, prev_bpm = segments[index - 1]
            current_start_beat, _ = segments[index]
            beat_delta = current_start_beat - prev_start_beat
            self._cumulative_seconds_at_start.append(
                self._cumulative_seconds_at_start[-1] + beat_delta * (60.0 / prev_bpm)
            )

    @classmethod
    def from_bpm(cls, bpm: float, offset_seconds: float = 0.0) -> "BpmContext":
        return cls([(0.0, float(bpm))], offset_seconds=offset_seconds)

    def bpm_segments(self) -> List[Tuple[float, float]]:
        return list(self._segments)

    def to_real_time(self, beat: float) -> float:
        beat_number = float(beat)
        segment_index = 0
        for index, (start_beat, _bpm) in enumerate(self._segments):
            if beat_number >= start_beat:
                segment_index = index
            else:
                break
        segment_start_beat, segment_bpm = self._segments[segment_index]
        seconds_per_beat = 60.0 / segment_bpm
        return (
            self._cumulative_seconds_at_start[segment_index]
            + (beat_number - segment_start_beat) * seconds_per_beat
            + self._offset_seconds
        )

    def beats_to_seconds(self, start_beat: float, end_beat: float) -> float:
        if float(start_beat) == 0.0 and float(end_beat) == 0.0:
            return 0.0
        return self.to_real_time(end_beat) - self.to_real_time(start_beat)


def _ms(bpm_context: BpmContext, beat: float) -> float:
    return bpm_context.to_real_time(beat) * 1000.0


def normalize_map_objects(map_objects: MapObjects, bpm_context: BpmContext) -> MapObjects:
    """Return a copy of map_objects with real time fields derived from beat time."""
    if map_objects is None or bpm_context is None:
        raise ValueError("map_objects and bpm_context are required")

    def with_time(item):
        changes = {"time_ms": _ms(bpm_context, item.beat)}
        if isinstance(item, (ChainEvent, ArcEvent)):
            changes["tail_time_ms"] = _ms(bpm_context, item.tail_beat)
        return dataclasses.replace(item, **changes)

    return MapObjects(
        notes=[with_time(note) for note in map_objects.notes],
        chains=[with_time(chain) for chain in map_objects.chains],
        bombs=[with_time(bomb) for bomb in map_objects.bombs],
        obstacles=[with_time(obstacle) for obstacle in map_objects.obstacles],
        arcs=[with_time(arc) for arc in map_objects.arcs],
    )


def swing_ebpm(start_ms: float, end_ms: float) -> float:
    """Effective BPM of a swing spanning two boundaries. Equal boundaries yield 0."""
    if float(start_ms) == float(end_ms):
        return 0.0
    seconds_diff = (float(end_ms) - float(start_ms)) / 1000.0
    return 60.0 / (2.0 * seconds_diff)


def _run_unit_tests() -> None:
    context = BpmContext.from_bpm(120.0)
    assert abs(context.to_real_time(2.0) - 1.0) < 1e-9
    assert context.beats_to_seconds(0.0, 0.0) == 0.0

    changing = BpmContext([(4.0, 60.0), (0.0, 120.0)], offset_seconds=0.5)
    # 4 beats at 120 BPM, then 1 beat at 60 BPM, plus offset.
    assert abs(changing.to_real_time(5.0) - 3.5) < 1e-9

    assert swing_ebpm(1000.0, 1000.0) == 0.0
    assert abs(swing_ebpm(0.0, 500.0) - 60.0) < 1e-9

    try:
        BpmContext.from_bpm(0.0)
    except ValueError:
        pass
    else:
        raise AssertionError("Expected ValueError for zero BPM")


if __name__ == "__main__":
    _run_unit_tests()
    print("timing_model.py: ok")
