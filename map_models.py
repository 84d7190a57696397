# -*- coding: utf-8 -*-
########################
# map_models.py
########################
# Purpose:
# - Core map data models for the simulation pipeline.
# - Defines the timed map objects (notes, chains, obstacles, bombs, arcs) and the enums shared by
#   every simulation stage.
#
# Design notes:
# - Keep these models stable. Prefer extending with new optional fields rather than breaking changes.
# - Map objects are frozen dataclasses. The derived real time (time_ms) is written once by
#   timing_model.normalize_map_objects, which returns new instances.
# - Every map object class exposes a class level `kind`. Dispatch points switch on `kind` and must
#   raise TypeError for an unknown kind.
#
########################
# Interfaces:
# Public enums:
# - class Hand(enum.IntEnum): LEFT | RIGHT
# - class CutDirection(enum.IntEnum): UP | DOWN | LEFT | RIGHT | UP_LEFT | UP_RIGHT | DOWN_LEFT | DOWN_RIGHT | ANY
# - class Parity(enum.IntEnum): UNDETERMINED | FOREHAND | BACKHAND
# - class SwingType(enum.IntEnum): UNKNOWN | NORMAL | STACK | WINDOW | SLIDER | CHAIN | DOT_SPAM | BLANK
# - class ResetType(enum.IntEnum): NONE | BOMB | ANGLE
# - class EventKind(enum.Enum): NOTE | CHAIN | OBSTACLE | BOMB | ARC
#
# Public dataclasses:
# - NoteEvent(beat: float, x: int, y: int, hand: Hand, direction: CutDirection, time_ms: float)
# - ChainEvent(NoteEvent fields + tail_beat, tail_x, tail_y, tail_time_ms, slice_count, squish)
# - ObstacleEvent(beat: float, x: int, y: int, width: int, height: int, duration: float, time_ms: float)
# - BombEvent(beat: float, x: int, y: int, time_ms: float)
# - ArcEvent(beat, x, y, hand, direction, tail_beat, tail_x, tail_y, tail_direction, time_ms, tail_time_ms)
# - MapObjects(notes, chains, bombs, obstacles, arcs)
#
# Inputs/Outputs:
# - These types are exchanged between timing_model, map_processor, the buffers, swing_data and bot_state.
#
########################

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import ClassVar, List, Union


class Hand(enum.IntEnum):
    LEFT = 0
    RIGHT = 1


class CutDirection(enum.IntEnum):
    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3
    UP_LEFT = 4
    UP_RIGHT = 5
    DOWN_LEFT = 6
    DOWN_RIGHT = 7
    ANY = 8


class Parity(enum.IntEnum):
    UNDETERMINED = 0
    FOREHAND = 1  # wrist goes down
    BACKHAND = 2  # wrist goes up


class SwingType(enum.IntEnum):
    UNKNOWN = 0
    NORMAL = 1
    STACK = 2
    WINDOW = 3
    SLIDER = 4
    CHAIN = 5
    DOT_SPAM = 6
    BLANK = 99


class ResetType(enum.IntEnum):
    NONE = 0
    BOMB = 1
    ANGLE = 2


class EventKind(enum.Enum):
    NOTE = "note"
    CHAIN = "chain"
    OBSTACLE = "obstacle"
    BOMB = "bomb"
    ARC = "arc"


@dataclass(frozen=True)
class NoteEvent:
    kind: ClassVar[EventKind] = EventKind.NOTE

    beat: float
    x: int
    y: int
    hand: Hand
    direction: CutDirection
    time_ms: float = 0.0

    @property
    def end_time_ms(self) -> float:
        return float(self.time_ms)


@dataclass(frozen=True)
class ChainEvent(NoteEvent):
    kind: ClassVar[EventKind] = EventKind.CHAIN

    tail_beat: float = 0.0
    tail_x: int = 0
    tail_y: int = 0
    tail_time_ms: float = 0.0
    slice_count: int = 3
    squish: float = 1.0

    @property
    def end_time_ms(self) -> float:
        return float(self.tail_time_ms)


@dataclass(frozen=True)
class ObstacleEvent:
    kind: ClassVar[EventKind] = EventKind.OBSTACLE

    beat: float
    x: int
    y: int
    width: int
    height: int
    duration: float
    time_ms: float = 0.0

    @property
    def end_beat(self) -> float:
        return float(self.beat) + float(self.duration)


@dataclass(frozen=True)
class BombEvent:
    kind: ClassVar[EventKind] = EventKind.BOMB

    beat: float
    x: int
    y: int
    time_ms: float = 0.0


@dataclass(frozen=True)
class ArcEvent:
    kind: ClassVar[EventKind] = EventKind.ARC

    beat: float
    x: int
    y: int
    hand: Hand
    direction: CutDirection
    tail_beat: float
    tail_x: int
    tail_y: int
    tail_direction: CutDirection = CutDirection.ANY
    time_ms: float = 0.0
    tail_time_ms: float = 0.0


MapObject = Union[NoteEvent, ChainEvent, ObstacleEvent, BombEvent, ArcEvent]


@dataclass
class MapObjects:
    notes: List[NoteEvent] = field(default_factory=list)
    chains: List[ChainEvent] = field(default_factory=list)
    bombs: List[BombEvent] = field(default_factory=list)
    obstacles: List[ObstacleEvent] = field(default_factory=list)
    arcs: List[ArcEvent] = field(default_factory=list)

    def all_objects(self) -> List[MapObject]:
        """Category order is part of the tie-break contract for equal beats."""
        merged: List[MapObject] = []
        merged.extend(self.notes)
        merged.extend(self.chains)
        merged.extend(self.bombs)
        merged.extend(self.obstacles)
        merged.extend(self.arcs)
        return merged
