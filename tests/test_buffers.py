from __future__ import annotations

from bomb_buffer import BombBuffer
from map_models import BombEvent, ChainEvent, CutDirection, Hand, NoteEvent, ObstacleEvent
from swing_buffer import SwingBuffer
from wall_buffer import WALL_EXPIRY_OFFSET, WallBuffer


def test_same_time_same_direction_notes_always_group(make_note) -> None:
    buffer = SwingBuffer()
    buffer.process(make_note(1.0, CutDirection.UP, x=1))
    assert buffer.process(make_note(1.0, CutDirection.UP, x=2)) is None
    assert len(buffer.get_buffer(Hand.RIGHT)) == 2


def test_notes_beyond_slider_precision_never_group(make_note) -> None:
    buffer = SwingBuffer(slider_precision=59.0)
    buffer.process(make_note(0.0, CutDirection.DOWN, time_ms=0.0))
    group = buffer.process(make_note(0.2, CutDirection.DOWN, time_ms=60.0))
    assert group is not None and len(group) == 1
    assert [note.time_ms for note in buffer.get_buffer(Hand.RIGHT)] == [60.0]


def test_direction_two_notches_apart_breaks_group(make_note) -> None:
    buffer = SwingBuffer()
    buffer.process(make_note(0.0, CutDirection.DOWN, time_ms=0.0))
    assert buffer.process(make_note(0.05, CutDirection.LEFT, time_ms=20.0)) is not None


def test_dot_continues_any_direction(make_note) -> None:
    buffer = SwingBuffer()
    buffer.process(make_note(0.0, CutDirection.DOWN, time_ms=0.0))
    assert buffer.process(make_note(0.05, CutDirection.ANY, time_ms=20.0)) is None
    assert buffer.process(make_note(0.1, CutDirection.UP, time_ms=40.0)) is None


def test_chain_tail_time_extends_group() -> None:
    buffer = SwingBuffer()
    chain = ChainEvent(
        beat=0.0,
        x=1,
        y=2,
        hand=Hand.LEFT,
        direction=CutDirection.DOWN,
        time_ms=0.0,
        tail_beat=0.5,
        tail_x=1,
        tail_y=0,
        tail_time_ms=250.0,
    )
    buffer.process(chain)
    follow = NoteEvent(beat=0.55, x=1, y=0, hand=Hand.LEFT, direction=CutDirection.DOWN, time_ms=280.0)
    assert buffer.process(follow) is None


def test_hands_never_mix(make_note) -> None:
    buffer = SwingBuffer()
    buffer.process(make_note(0.0, CutDirection.DOWN, hand=Hand.LEFT, time_ms=0.0))
    assert buffer.process(make_note(0.0, CutDirection.UP, hand=Hand.RIGHT, time_ms=0.0)) is None
    assert len(buffer.get_buffer(Hand.LEFT)) == 1
    assert len(buffer.get_buffer(Hand.RIGHT)) == 1


def test_lookahead_flush_leaves_next_note_out(make_note) -> None:
    buffer = SwingBuffer()
    buffer.process(make_note(0.0, CutDirection.DOWN, time_ms=0.0))
    flushed = buffer.try_flush_with_lookahead(make_note(1.0, CutDirection.UP))
    assert flushed is not None and len(flushed) == 1
    assert buffer.get_buffer(Hand.RIGHT) == []


def test_clone_is_independent(make_note) -> None:
    buffer = SwingBuffer()
    buffer.process(make_note(0.0))
    clone = buffer.clone()
    clone.force_flush(Hand.RIGHT)
    assert len(buffer.get_buffer(Hand.RIGHT)) == 1


def test_wall_blocks_columns_until_expiry() -> None:
    buffer = WallBuffer()
    buffer.process(ObstacleEvent(beat=0.0, x=1, y=0, width=2, height=5, duration=1.0))

    during = buffer.get_available_grid_spaces(0.5)
    for column in (1, 2):
        for row in range(3):
            assert (column, row) not in during
    assert (0, 1) in during and (3, 1) in during

    after = buffer.get_available_grid_spaces(1.0 + WALL_EXPIRY_OFFSET + 0.05)
    assert (1, 1) in after and (2, 0) in after
    assert buffer.active_walls() == []


def test_wall_margin_covers_row_below() -> None:
    buffer = WallBuffer()
    buffer.process(ObstacleEvent(beat=0.0, x=0, y=2, width=1, height=1, duration=1.0))
    assert buffer.is_blocked(0, 2)
    assert buffer.is_blocked(0, 1)
    assert not buffer.is_blocked(0, 0)


def test_wall_footprint_is_clamped_to_grid() -> None:
    buffer = WallBuffer()
    buffer.process(ObstacleEvent(beat=0.0, x=-2, y=0, width=3, height=1, duration=1.0))
    assert buffer.is_blocked(0, 0)
    assert not buffer.is_blocked(1, 0)


def test_bomb_buffer_returns_bombs_between_swings_in_order() -> None:
    buffer = BombBuffer()
    late = BombEvent(beat=2.0, x=0, y=0, time_ms=1000.0)
    early = BombEvent(beat=1.0, x=1, y=0, time_ms=500.0)
    outside = BombEvent(beat=4.0, x=1, y=0, time_ms=2000.0)
    for bomb in (late, early, outside, early):
        buffer.process(bomb)

    assert len(buffer.active_bombs()) == 3
    assert buffer.get_relevant_bombs(1000.0, 500.0) == [early, late]
    assert buffer.clone().active_bombs() == buffer.active_bombs()
