# -*- coding: utf-8 -*-
########################
# map_analysis.py
########################
# Purpose:
# - Analyse every difficulty of a map set: simulate each one and wrap the result in a
#   DifficultyAnalysis.
#
########################
# Key Logic:
# - Difficulties are independent. Each runs on its own root BotState, in a thread pool.
# - A failing difficulty is logged and stored as None. Sibling difficulties still complete.
# - Characteristic names are matched case insensitively.
#
########################
# Interfaces:
# Public dataclasses:
# - @dataclass(frozen=True) class DifficultyInput
#   - characteristic: str
#   - difficulty: str
#   - map_objects: map_models.MapObjects
#   - bpm_context: Optional[timing_model.BpmContext]  # when set, real times are derived first
#
# Public classes:
# - class MapAnalysis
#   - add_analysis(characteristic, difficulty, analysis) -> bool
#   - get_analysis(characteristic, difficulty) -> Optional[DifficultyAnalysis]
#   - get_analysis_by_characteristic(characteristic) -> list[DifficultyAnalysis]
#   - get_all_analyses() -> list[DifficultyAnalysis]
#   - failed_difficulties() -> list[tuple[str, str]]
#
# Public functions:
# - analyse_difficulty(map_objects, config=None, bpm_context=None) -> DifficultyAnalysis
# - analyse_difficulties(inputs, config=None, max_workers=None) -> MapAnalysis
#
########################
# Smoke Tests:
#   - python map_analysis.py
########################

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import config as config_module
import map_processor
import sample_map
from bot_statistics import HandResult
from difficulty_analysis import DifficultyAnalysis
from map_models import MapObjects
from timing_model import BpmContext, normalize_map_objects


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DifficultyInput:
    characteristic: str
    difficulty: str
    map_objects: MapObjects
    bpm_context: Optional[BpmContext] = None


def _characteristic_key(characteristic: str) -> str:
    return (characteristic or "").strip().casefold()


class MapAnalysis:
    def __init__(self) -> None:
        self._results: Dict[str, Dict[str, Optional[DifficultyAnalysis]]] = {}

    @property
    def results(self) -> Dict[str, Dict[str, Optional[DifficultyAnalysis]]]:
        return {name: dict(by_difficulty) for name, by_difficulty in self._results.items()}

    def add_analysis(self, characteristic: str, difficulty: str, analysis: Optional[DifficultyAnalysis]) -> bool:
        key = _characteristic_key(characteristic)
        if not key:
            return False
        self._results.setdefault(key, {})[str(difficulty)] = analysis
        return True

    def get_analysis(self, characteristic: str, difficulty: str) -> Optional[DifficultyAnalysis]:
        key = _characteristic_key(characteristic)
        if not key:
            return None
        return self._results.get(key, {}).get(str(difficulty))

    def get_analysis_by_characteristic(self, characteristic: str) -> List[DifficultyAnalysis]:
        key = _characteristic_key(characteristic)
        return [analysis for analysis in self._results.get(key, {}).values() if analysis is not None]

    def get_all_analyses(self) -> List[DifficultyAnalysis]:
        return [
            analysis
            for by_difficulty in self._results.values()
            for analysis in by_difficulty.values()
            if analysis is not None
        ]

    def failed_difficulties(self) -> List[Tuple[str, str]]:
        return [
            (characteristic, difficulty)
            for characteristic, by_difficulty in self._results.items()
            for difficulty, analysis in by_difficulty.items()
            if analysis is None
        ]


def analyse_difficulty(
    map_objects: MapObjects,
    analysis_config: Optional[config_module.AnalysisConfig] = None,
    bpm_context: Optional[BpmContext] = None,
) -> DifficultyAnalysis:
    if map_objects is None:
        raise ValueError("map_objects is required")
    objects = normalize_map_objects(map_objects, bpm_context) if bpm_context is not None else map_objects
    state = map_processor.run(objects, analysis_config)
    return DifficultyAnalysis(objects, state)


def analyse_difficulties(
    inputs: Sequence[DifficultyInput],
    app_config: Optional[config_module.AppConfig] = None,
    max_workers: Optional[int] = None,
) -> MapAnalysis:
    if inputs is None:
        raise ValueError("inputs is required")

    resolved_config = app_config if app_config is not None else config_module.AppConfig()
    worker_count = int(max_workers) if max_workers is not None else int(resolved_config.batch.max_workers)
    worker_count = max(1, worker_count)

    analysis = MapAnalysis()
    logger.info("Analysing %d difficulties with %d workers", len(inputs), worker_count)

    with ThreadPoolExecutor(max_workers=worker_count) as executor:
        futures = [
            (
                item,
                executor.submit(analyse_difficulty, item.map_objects, resolved_config.analysis, item.bpm_context),
            )
            for item in inputs
        ]
        for item, future in futures:
            try:
                result: Optional[DifficultyAnalysis] = future.result()
            except Exception:
                logger.exception("Analysis failed for %s / %s", item.characteristic, item.difficulty)
                result = None
            analysis.add_analysis(item.characteristic, item.difficulty, result)

    return analysis


def _run_unit_tests() -> None:
    inputs = [
        DifficultyInput("Standard", difficulty, sample_map.build_sample_map(difficulty=difficulty).map_objects)
        for difficulty in ("easy", "medium", "hard")
    ]
    inputs.append(DifficultyInput("Standard", "broken", None))  # type: ignore[arg-type]

    result = analyse_difficulties(inputs, max_workers=2)
    assert len(result.get_all_analyses()) == 3
    assert result.failed_difficulties() == [("standard", "broken")]
    assert result.get_analysis("STANDARD", "easy") is not None
    assert result.get_analysis("", "easy") is None

    easy = result.get_analysis("standard", "easy")
    assert easy is not None and len(easy.swings(HandResult.LEFT)) == 16


def main() -> int:
    """Smoke test entrypoint. Prints a summary of the sample map set."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    try:
        _run_unit_tests()
    except Exception as exc:
        print("Map analysis smoke tests: FAIL")
        print(str(exc))
        return 2

    hard = analyse_difficulty(sample_map.build_sample_map(difficulty="hard").map_objects)
    print(hard.summary())
    print("Map analysis smoke tests: PASS")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
