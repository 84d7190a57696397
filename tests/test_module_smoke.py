from __future__ import annotations

import importlib

import pytest


SMOKE_MODULES = [
    "bomb_buffer",
    "directions",
    "timing_model",
    "swing_buffer",
    "wall_buffer",
    "swing_classifier",
    "swing_data",
    "parity",
    "bot_state",
    "map_processor",
    "bot_statistics",
    "difficulty_analysis",
    "map_analysis",
]


@pytest.mark.parametrize("module_name", SMOKE_MODULES)
def test_module_smoke_routine_passes(module_name: str) -> None:
    module = importlib.import_module(module_name)
    module._run_unit_tests()
