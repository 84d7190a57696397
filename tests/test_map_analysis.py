from __future__ import annotations

import logging

import pytest

import map_analysis
import sample_map
from bot_statistics import HandResult
from config import AnalysisConfig, AppConfig
from map_models import CutDirection, Hand, MapObjects, NoteEvent
from timing_model import BpmContext


def _inputs():
    return [
        map_analysis.DifficultyInput("Standard", difficulty, sample_map.build_sample_map(difficulty=difficulty).map_objects)
        for difficulty in ("easy", "medium", "hard")
    ]


def test_every_difficulty_is_analysed() -> None:
    result = map_analysis.analyse_difficulties(_inputs(), max_workers=3)

    assert len(result.get_all_analyses()) == 3
    assert len(result.get_analysis_by_characteristic("standard")) == 3
    assert result.failed_difficulties() == []
    assert result.get_analysis("Lawless", "easy") is None


def test_failed_difficulty_is_logged_and_isolated(caplog) -> None:
    inputs = _inputs() + [map_analysis.DifficultyInput("OneSaber", "expert", None)]

    with caplog.at_level(logging.ERROR, logger="map_analysis"):
        result = map_analysis.analyse_difficulties(inputs, AppConfig())

    assert result.failed_difficulties() == [("onesaber", "expert")]
    assert result.get_analysis("OneSaber", "expert") is None
    assert len(result.get_all_analyses()) == 3
    assert any("OneSaber / expert" in record.getMessage() for record in caplog.records)


def test_bpm_context_fills_real_time() -> None:
    notes = [
        NoteEvent(beat=float(beat), x=1, y=0, hand=Hand.RIGHT, direction=CutDirection.DOWN if beat % 2 == 0 else CutDirection.UP)
        for beat in range(4)
    ]
    analysis = map_analysis.analyse_difficulty(MapObjects(notes=notes), AnalysisConfig(), BpmContext.from_bpm(120.0))

    right = analysis.swings(HandResult.RIGHT)
    assert [swing.start_frame.time_ms for swing in right] == pytest.approx([0.0, 500.0, 1000.0, 1500.0])
    assert analysis.get_average_ebpm(HandResult.RIGHT) == pytest.approx(45.0)


def test_empty_characteristic_is_refused() -> None:
    result = map_analysis.MapAnalysis()
    assert result.add_analysis("  ", "easy", None) is False
    assert result.results == {}
