import pytest

from seqtimeline.header import SpanAction, TickKind, TimelineHeader
from seqtimeline.sequence import Sequence
from seqtimeline.timing import Cue


@pytest.fixture
def seq():
    return Sequence("Main", total_time=30.0, fps=50)


@pytest.fixture
def header(seq):
    return TimelineHeader(seq, width=300)


def test_view_edges_map_to_header_edges(header, seq):
    assert header.get_x_for_time(seq.view_start) == 0
    assert header.get_x_for_time(seq.view_end) == header.width


@pytest.mark.parametrize("t", [0.0, 1.0, 7.0, 12.5, 29.0])
def test_time_x_round_trip(header, t):
    assert header.get_time_for_x(header.get_x_for_time(t)) == pytest.approx(t)


def test_relative_offsets_from_view_start(header, seq):
    seq.set_view(10.0, 20.0)
    for d in (1.0, 2.5, 5.0):
        assert header.get_x_for_time(d, relative=True) == header.get_x_for_time(seq.view_start + d)


def test_time_for_x_is_frame_snapped(seq):
    header = TimelineHeader(seq, width=777)
    for x in (13, 101, 555):
        frames = header.get_time_for_x(x) * seq.fps
        assert frames == pytest.approx(round(frames))


def test_mouse_down_seeks_and_collects_snap_times(header, seq):
    seq.add_cue(Cue(5.0, "a"))
    header.mouse_down(100)
    assert seq.current_time == pytest.approx(header.get_time_for_x(100))
    assert seq.current_time not in header.snap_times
    assert 5.0 in header.snap_times


def test_shift_drag_snaps_to_cue(header, seq):
    seq.add_cue(Cue(5.0, "a"))
    header.mouse_down(0)
    header.mouse_drag(52, shift=True)
    assert seq.current_time == 5.0
    header.mouse_drag(52, shift=False)
    assert seq.current_time == pytest.approx(header.get_time_for_x(52))


def test_command_drag_returns_ordered_span(header, seq):
    header.mouse_down(200, command=True)
    header.mouse_drag(50, command=True)
    span = header.mouse_up(command=True, dragged=True)
    assert span == (header.get_time_for_x(50), header.get_time_for_x(200))
    assert seq.view_start == 0.0


def test_mouse_up_without_drag_returns_none(header):
    header.mouse_down(100, command=True)
    assert header.mouse_up(command=True, dragged=False) is None
    assert header.selection_span == (-1.0, 0.0)


def test_select_items_in_span(header, seq):
    a = seq.add_cue(Cue(2.0, "a"))
    b = seq.add_cue(Cue(6.0, "b"))
    assert header.apply_span_action(SpanAction.SELECT_ITEMS, 1.0, 3.0) == [a]
    assert seq.cues == [a, b]


def test_remove_items_in_span(header, seq):
    a = seq.add_cue(Cue(2.0, "a"))
    b = seq.add_cue(Cue(6.0, "b"))
    removed = header.apply_span_action(SpanAction.REMOVE_ITEMS, 1.0, 3.0)
    assert removed == [a]
    assert seq.cues == [b]
    assert b.time == 6.0


def test_remove_timespan_shifts_later_cues(header, seq):
    seq.add_cue(Cue(2.0, "a"))
    b = seq.add_cue(Cue(6.0, "b"))
    total = seq.total_time
    header.apply_span_action(SpanAction.REMOVE_TIMESPAN, 1.0, 3.0)
    assert seq.cues == [b]
    assert b.time == pytest.approx(6.0 - 2.0)
    assert seq.total_time == pytest.approx(total - 2.0)


def test_insert_timespan_shifts_and_extends(header, seq):
    a = seq.add_cue(Cue(2.0, "a"))
    b = seq.add_cue(Cue(6.0, "b"))
    total = seq.total_time
    shifted = header.apply_span_action(SpanAction.INSERT_TIMESPAN, 4.0, 7.0)
    assert shifted == [b]
    assert a.time == 2.0
    assert b.time == pytest.approx(6.0 + 3.0)
    assert seq.total_time == pytest.approx(total + 3.0)


def test_time_ticks_minute_and_seconds(header):
    ticks = header.time_ticks()
    minutes = [t for t in ticks if t.kind is TickKind.MINUTE]
    seconds = [t for t in ticks if t.kind is TickKind.SECOND]
    assert [m.label for m in minutes] == ["0'"]
    assert all(0 <= t.x < header.width for t in ticks)
    assert [s.time for s in seconds] == sorted(s.time for s in seconds)
    assert all(s.label == str(int(s.time)) for s in seconds)


def test_frame_ticks_when_zoomed_in(header, seq):
    seq.set_view(0.0, 2.0)
    ticks = header.time_ticks()
    frames = [t for t in ticks if t.kind is TickKind.FRAME]
    assert frames
    assert all(f.x >= 0 and f.x + f.width < header.width for f in frames)


def test_beat_marks_off_by_default(header):
    assert header.beat_marks() == []


def test_beat_marks_bars(header, seq):
    seq.bpm_preview_enabled = True
    marks = header.beat_marks()
    assert marks
    beats = [m.beat for m in marks]
    assert beats == sorted(beats, reverse=True)
    for m in marks:
        assert 0.0 <= m.rel_beat < 1.0
        assert m.x <= m.x2
        if m.bar is not None:
            assert m.beat % seq.beats_per_bar == 0
            assert m.bar == m.beat // seq.beats_per_bar + 1
            assert 0.0 <= m.label_alpha <= 1.0