# sample_map.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List

from map_models import (
    ArcEvent,
    BombEvent,
    ChainEvent,
    CutDirection,
    Hand,
    MapObjects,
    NoteEvent,
    ObstacleEvent,
)
from timing_model import BpmContext, normalize_map_objects


@dataclass(frozen=True)
class SampleMap:
    difficulty: str
    bpm: float
    map_objects: MapObjects


def build_sample_map(*, difficulty: str) -> SampleMap:
    normalized_difficulty = (difficulty or "easy").strip().lower() or "easy"

    if normalized_difficulty == "hard":
        step_beats = 0.5
        total_swings = 32
        bpm = 150.0
    elif normalized_difficulty == "medium":
        step_beats = 1.0
        total_swings = 24
        bpm = 130.0
    else:
        normalized_difficulty = "easy"
        step_beats = 1.0
        total_swings = 16
        bpm = 110.0

    lead_in_beats = 4.0

    # Deterministic column pattern per hand: left stays on columns 0-1, right on 2-3.
    left_columns = [1, 0, 1, 1, 0, 1, 0, 0]
    right_columns = [2, 3, 2, 2, 3, 2, 3, 3]
    rows = [0, 0, 1, 0, 2, 0, 1, 0]

    notes: List[NoteEvent] = []
    current_beat = lead_in_beats
    for swing_index in range(total_swings):
        # Down on even swings, up on odd swings: plain alternating parity.
        direction = CutDirection.DOWN if swing_index % 2 == 0 else CutDirection.UP
        pattern_index = swing_index % len(rows)
        notes.append(
            NoteEvent(
                beat=current_beat,
                x=left_columns[pattern_index],
                y=rows[pattern_index],
                hand=Hand.LEFT,
                direction=direction,
            )
        )
        notes.append(
            NoteEvent(
                beat=current_beat + step_beats * 0.5,
                x=right_columns[pattern_index],
                y=rows[pattern_index],
                hand=Hand.RIGHT,
                direction=direction,
            )
        )
        current_beat += step_beats

    chains: List[ChainEvent] = []
    obstacles: List[ObstacleEvent] = []
    bombs: List[BombEvent] = []
    arcs: List[ArcEvent] = []

    end_beat = current_beat
    if normalized_difficulty in ("medium", "hard"):
        # Same snap dot stack on the right hand, then a chain finishing the map.
        notes.append(NoteEvent(beat=end_beat, x=2, y=0, hand=Hand.RIGHT, direction=CutDirection.ANY))
        notes.append(NoteEvent(beat=end_beat, x=3, y=0, hand=Hand.RIGHT, direction=CutDirection.ANY))
        chains.append(
            ChainEvent(
                beat=end_beat + 2.0,
                x=1,
                y=2,
                hand=Hand.LEFT,
                direction=CutDirection.DOWN,
                tail_beat=end_beat + 2.25,
                tail_x=1,
                tail_y=0,
                slice_count=4,
            )
        )
        bombs.append(BombEvent(beat=lead_in_beats + 6.25, x=0, y=0))

    if normalized_difficulty == "hard":
        obstacles.append(ObstacleEvent(beat=lead_in_beats + 2.0, x=0, y=0, width=1, height=5, duration=2.0))
        arcs.append(
            ArcEvent(
                beat=lead_in_beats,
                x=1,
                y=0,
                hand=Hand.LEFT,
                direction=CutDirection.DOWN,
                tail_beat=lead_in_beats + 1.0,
                tail_x=1,
                tail_y=0,
                tail_direction=CutDirection.UP,
            )
        )

    notes.sort(key=lambda note: (note.beat, int(note.hand)))
    raw_objects = MapObjects(notes=notes, chains=chains, bombs=bombs, obstacles=obstacles, arcs=arcs)
    return SampleMap(
        difficulty=normalized_difficulty,
        bpm=bpm,
        map_objects=normalize_map_objects(raw_objects, BpmContext.from_bpm(bpm)),
    )
