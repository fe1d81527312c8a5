"""Time ruler above a sequence's layers: ticks, beats, seeking and span edits."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from seqtimeline.sequence import Sequence
from seqtimeline.timing import Cue, get_closest_snap_time_for

TIME_ROW_HEIGHT = 35
_MIN_GAP = 10
_FADE_GAP = 25
_MIN_FRAME_GAP = 2
_FADE_FRAME_GAP = 10
_MIN_SHOW_BAR_WIDTH = 30
_BAR_LABEL_FADE = 20
_NO_SPAN = (-1.0, 0.0)


def _jmap(value: float, source_min: float, source_max: float,
          target_min: float, target_max: float) -> float:
    return target_min + (value - source_min) * (target_max - target_min) / (source_max - source_min)


def _clamp01(value: float) -> float:
    return min(max(value, 0.0), 1.0)


class SpanAction(Enum):
    """Actions offered for a time span selected in the header."""

    SELECT_ITEMS = 1
    REMOVE_ITEMS = 2
    REMOVE_TIMESPAN = 3
    INSERT_TIMESPAN = 4


class TickKind(Enum):
    """Kinds of marks drawn on the time ruler."""

    MINUTE = "minute"
    SECOND = "second"
    FRAME = "frame"


@dataclass(frozen=True)
class TimeTick:
    """A visible ruler mark; frame marks span ``width`` pixels."""

    kind: TickKind
    time: float
    x: int
    label: str = ""
    alpha: float = 1.0
    width: int = 0


@dataclass(frozen=True)
class BeatMark:
    """One beat of the BPM preview row; ``bar`` is set on labelled bars."""

    beat: int
    x: int
    x2: int
    rel_beat: float
    bar: int | None = None
    label_alpha: float = 0.0


class TimelineHeader:
    """Maps pixels to time for a sequence's view and handles ruler input."""

    def __init__(self, sequence: Sequence, width: int = 100) -> None:
        self.sequence = sequence
        self.width = width
        self.selection_zoom_mode = False
        self.selection_span: tuple[float, float] = _NO_SPAN
        self.snap_times: list[float] = []

    # ---- coordinates -----------------------------------------------------

    def get_x_for_time(self, time: float, relative: bool = False) -> int:
        """Pixel position of a time (or of a duration when ``relative``)."""
        view_start = self.sequence.view_start
        view_end = self.sequence.view_end
        if view_start == view_end:
            return 0
        t = time + (view_start if relative else 0.0)
        return int(_jmap(t, view_start, view_end, 0.0, float(self.width)))

    def get_time_for_x(self, x: int) -> float:
        """Time under a pixel, snapped to the sequence's frame steps."""
        view_start = self.sequence.view_start
        view_end = self.sequence.view_end
        if self.width == 0:
            value = view_start
        else:
            value = _jmap(float(x), 0.0, float(self.width), view_start, view_end)
        steps = self.sequence.unit_steps
        if steps > 0:
            value = round(value * steps) / steps
        return value

    # ---- ruler content ---------------------------------------------------

    def time_ticks(self) -> list[TimeTick]:
        """Minute, second and frame marks visible in the current view."""
        start = math.floor(self.sequence.view_start)
        end = math.floor(self.sequence.view_end)
        if end <= start or self.width <= 0:
            return []

        fps = int(self.sequence.fps)
        unit_gap = self.width / (end - start)
        second_gap = unit_gap
        frame_gap = second_gap / fps
        minute_gap = second_gap * 60

        show_seconds = minute_gap > _MIN_GAP
        show_frames = frame_gap > _MIN_FRAME_GAP

        second_steps = 1
        minute_steps = 1
        if show_seconds:
            while second_gap < _MIN_GAP:
                second_steps *= 2
                second_gap = unit_gap * second_steps
        else:
            while minute_gap < _MIN_GAP:
                minute_steps *= 2
                minute_gap = unit_gap * 60 * minute_steps

        minute_start = math.floor((start / minute_steps) / 60) * minute_steps
        minute_end = math.ceil((end / minute_steps) / 60) * minute_steps
        fade_alpha = _clamp01(_jmap(second_gap, _MIN_GAP, _FADE_GAP, 0.0, 1.0))
        fade_frame_alpha = _clamp01(_jmap(frame_gap, _MIN_FRAME_GAP, _FADE_FRAME_GAP, 0.0, 1.0))

        ticks: list[TimeTick] = []
        for minute in range(minute_start, minute_end + 1, minute_steps):
            minute_time = minute * 60.0
            mtx = self.get_x_for_time(minute_time)
            if 0 <= mtx < self.width:
                ticks.append(TimeTick(TickKind.MINUTE, minute_time, mtx, f"{minute}'"))

            if not show_seconds:
                continue

            second_index = 0
            second = 0
            while second < 60 and minute_time + second <= end:
                second_time = minute_time + second
                stx = self.get_x_for_time(second_time)

                if show_frames:
                    for frame in range(0, fps, 2):
                        ftx = self.get_x_for_time(second_time + frame / fps)
                        ftx2 = self.get_x_for_time(second_time + (frame + 1) / fps)
                        if ftx >= 0 and ftx2 < self.width:
                            ticks.append(TimeTick(
                                TickKind.FRAME, second_time + frame / fps, ftx,
                                alpha=fade_frame_alpha, width=ftx2 - ftx,
                            ))

                if second >= second_steps:
                    if 0 <= stx < self.width:
                        alpha = fade_alpha if second_index % 2 == 0 else 1.0
                        ticks.append(TimeTick(TickKind.SECOND, second_time, stx, str(second), alpha))
                    second_index += 1
                second += second_steps
        return ticks

    def beat_marks(self) -> list[BeatMark]:
        """Beats of the BPM preview row; empty when the preview is off."""
        seq = self.sequence
        if not seq.bpm_preview_enabled or self.width <= 0 or seq.view_end <= seq.view_start:
            return []

        start = math.floor(seq.view_start)
        end = math.floor(seq.view_end)
        beat_time = 60.0 / seq.bpm_preview
        beats_per_bar = int(seq.beats_per_bar)

        start_beat = math.floor(start / beat_time)
        end_beat = math.ceil(end / beat_time) + 1

        show_bar_step = 1
        show_bar_width = self.get_x_for_time(beat_time * show_bar_step * beats_per_bar, True)
        while show_bar_width < _MIN_SHOW_BAR_WIDTH:
            show_bar_step *= 2
            show_bar_width = self.get_x_for_time(beat_time * show_bar_step * beats_per_bar, True)
        show_bar_next_step = show_bar_step * 2

        marks: list[BeatMark] = []
        for beat in range(end_beat, start_beat - 1, -1):
            tx = self.get_x_for_time(beat * beat_time)
            tx2 = self.get_x_for_time((beat + 1) * beat_time)
            rel_beat = (beat % beats_per_bar) / beats_per_bar

            bar: int | None = None
            label_alpha = 0.0
            if beat % beats_per_bar == 0:
                current_bar = beat // beats_per_bar + 1
                if current_bar % show_bar_step == 0:
                    bar = current_bar
                    if current_bar % show_bar_next_step == 0:
                        label_alpha = 1.0
                    else:
                        label_alpha = min((show_bar_width - _MIN_SHOW_BAR_WIDTH) / _BAR_LABEL_FADE, 1.0)
            marks.append(BeatMark(beat, tx, tx2, rel_beat, bar, label_alpha))
        return marks

    # ---- mouse -----------------------------------------------------------

    @staticmethod
    def _is_span_gesture(left: bool, right: bool, command: bool) -> bool:
        return right or (left and command)

    def mouse_down(self, x: int, left: bool = True, right: bool = False,
                   command: bool = False) -> None:
        """Start a span selection, or seek and collect snap times."""
        if self._is_span_gesture(left, right, command):
            pos = self.get_time_for_x(x)
            self.selection_span = (pos, pos)
            self.selection_zoom_mode = right
        elif left:
            self.sequence.set_current_time(self.get_time_for_x(x), True, True)
            current = self.sequence.current_time
            self.snap_times = [t for t in self.sequence.get_snap_times() if t != current]

    def mouse_drag(self, x: int, left: bool = True, right: bool = False,
                   command: bool = False, shift: bool = False) -> None:
        """Extend the span selection, or seek (snapping with shift)."""
        if self._is_span_gesture(left, right, command):
            pos = self.get_time_for_x(x)
            first, _ = self.selection_span
            if first < 0:
                first = pos
            self.selection_span = (first, pos)
        elif left:
            target = self.get_time_for_x(x)
            if shift:
                target = get_closest_snap_time_for(self.snap_times, target)
            self.sequence.set_current_time(target, True, True)

    def mouse_up(self, left: bool = True, right: bool = False, command: bool = False,
                 dragged: bool = False) -> tuple[float, float] | None:
        """Finish a gesture.

        A zoom span sets the view; a selection span is returned as
        ``(start, end)`` for :meth:`apply_span_action`. Otherwise None.
        """
        result: tuple[float, float] | None = None
        first, second = self.selection_span
        if self._is_span_gesture(left, right, command) and dragged and first >= 0:
            low, high = min(first, second), max(first, second)
            if self.selection_zoom_mode:
                self.sequence.set_view(low, high)
            else:
                result = (low, high)
        self.selection_span = _NO_SPAN
        return result

    def apply_span_action(self, action: SpanAction, start: float, end: float) -> list[Cue]:
        """Apply a span action to the sequence's cues; returns the cues affected."""
        seq = self.sequence
        inside = [c for c in seq.cues if start <= c.time <= end]

        if action is SpanAction.SELECT_ITEMS:
            return inside

        if action is SpanAction.REMOVE_ITEMS:
            self._drop_cues(inside)
            return inside

        if action is SpanAction.REMOVE_TIMESPAN:
            length = end - start
            self._drop_cues(inside)
            for cue in seq.cues:
                if cue.time > end:
                    cue.time -= length
            seq.set_total_time(seq.total_time - length)
            return inside

        length = end - start
        seq.set_total_time(seq.total_time + length)
        shifted = [c for c in seq.cues if c.time >= start]
        for cue in shifted:
            cue.time += length
        return shifted

    def _drop_cues(self, removed: list[Cue]) -> None:
        gone = {id(c) for c in removed}
        kept = [c for c in self.sequence.cues if id(c) not in gone]
        for cue in kept:
            if cue.loop_target is not None and id(cue.loop_target) in gone:
                cue.loop_target = None
        self.sequence.cues = kept