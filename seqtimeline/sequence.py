"""A timed sequence: playhead, transport, cues, view range and snapping."""

from __future__ import annotations

from typing import Any, Iterable

from seqtimeline.timing import (
    Cue,
    CueAction,
    EvaluateMode,
    beat_times,
    frames_per_second_step,
    get_frame_for_time,
    get_next_frame_time_for_time,
    get_prev_frame_time_for_time,
    get_time_for_frame,
    should_evaluate,
)

MIN_SEQUENCE_TIME = 1.0
MIN_FPS = 1
MAX_FPS = 500
DEFAULT_TOTAL_TIME = 30.0
DEFAULT_FPS = 50
DEFAULT_SAMPLE_RATE = 44100.0
_PREV_CUE_THRESHOLD = 1.0
_VIEW_FOLLOW_LERP = 0.3


def _limit(low: float, high: float, value: float) -> float:
    if value < low:
        return low
    if high < value:
        return high
    return value


class SequenceListener:
    """Base for objects that receive sequence notifications.

    A subclass defines only the handlers it is interested in; the sequence
    calls a handler only when the listener has it. The handlers are::

        sequence_play_state_changed(sequence)
        sequence_current_time_changed(sequence, prev_time, evaluate_skipped_data)
        sequence_finished(sequence)
        sequence_looped(sequence)
        sequence_play_speed_changed(sequence)
        sequence_play_direction_changed(sequence)
        sequence_total_time_changed(sequence)
        sequence_editing_state_changed(sequence)
    """

    EVENTS = (
        "sequence_play_state_changed",
        "sequence_current_time_changed",
        "sequence_finished",
        "sequence_looped",
        "sequence_play_speed_changed",
        "sequence_play_direction_changed",
        "sequence_total_time_changed",
        "sequence_editing_state_changed",
    )


class Sequence:
    """A sequence of timed content with a transport and a playhead.

    Time advances through :meth:`advance` (wall-clock ticks) or, when
    ``audio_driven`` is set, is tracked in ``hi_res_audio_time`` through
    :meth:`audio_block`.
    """

    def __init__(
        self,
        name: str = "Sequence",
        total_time: float = DEFAULT_TOTAL_TIME,
        fps: int = DEFAULT_FPS,
    ) -> None:
        self.name = name
        self._listeners: list[SequenceListener] = []

        self._total_time = max(float(total_time), MIN_SEQUENCE_TIME)
        self._current_time = 0.0
        self._play_speed = 1.0
        self._prev_speed = 1.0
        self._fps = int(_limit(MIN_FPS, MAX_FPS, int(fps)))
        self._is_playing = False

        self.start_at_load = False
        self.include_current_time_in_save = False
        self.loop = False
        self.auto_snap = False
        self.evaluate_on_seek = EvaluateMode.ONLY_PLAYING
        self.bpm_preview = 120.0
        self.bpm_preview_enabled = False
        self.beats_per_bar = 4

        self.min_view_time = 1.0
        self.view_follow_time = False
        self._view_start_range = (0.0, self._total_time - 0.01)
        self._view_end_range = (0.01, self._total_time)
        self._view_start = 0.0
        self._view_end = self._total_time
        self.follow_view_range = self._view_end - self._view_start

        self.is_being_edited = False
        self.cues: list[Cue] = []

        self.audio_driven = False
        self.hi_res_audio_time = 0.0
        self.sample_rate = DEFAULT_SAMPLE_RATE
        self.is_seeking = False
        self.prev_time = 0.0
        self.target_time = 0.0
        self.unit_steps = frames_per_second_step(self._fps, self._play_speed)

    # ---- read-only state -------------------------------------------------

    @property
    def current_time(self) -> float:
        return self._current_time

    @property
    def total_time(self) -> float:
        return self._total_time

    @property
    def play_speed(self) -> float:
        return self._play_speed

    @property
    def fps(self) -> int:
        return self._fps

    @property
    def is_playing(self) -> bool:
        return self._is_playing

    @property
    def view_start(self) -> float:
        return self._view_start

    @property
    def view_end(self) -> float:
        return self._view_end

    # ---- listeners -------------------------------------------------------

    def add_listener(self, listener: SequenceListener) -> None:
        """Register a listener; registering twice has no effect."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: SequenceListener) -> None:
        """Unregister a listener; unknown listeners are ignored."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners):
            handler = getattr(listener, event, None)
            if handler is not None:
                handler(self, *args)

    # ---- time ------------------------------------------------------------

    def set_current_time(
        self, time: float, force_over_playing: bool = True, seek_mode: bool = False
    ) -> None:
        """Move the playhead, clamped to the sequence length.

        While playing, the move is ignored unless ``force_over_playing``.
        """
        time = _limit(0.0, self._total_time, float(time))
        if self._is_playing and not force_over_playing:
            return

        self.is_seeking = seek_mode
        if seek_mode or force_over_playing:
            self.target_time = time

        if self.audio_driven:
            self.hi_res_audio_time = time
            if not self._is_playing or self.is_seeking or force_over_playing:
                self._set_current_value(time)
        else:
            self._set_current_value(time)

        self.is_seeking = False

    def _set_current_value(self, value: float) -> None:
        value = _limit(0.0, self._total_time, value)
        if value == self._current_time:
            return
        self._current_time = value
        self._on_current_time_changed()

    def _on_current_time_changed(self) -> None:
        if self._is_playing and not self.is_seeking:
            low = min(self.prev_time, self._current_time)
            high = max(self.prev_time, self._current_time)
            forward = self._play_speed > 0
            cues = self._cues_in_timespan(low, high, not forward, forward)
            if cues:
                self.handle_cue_action(cues[0])

        if (not self._is_playing or self.is_seeking) and self.audio_driven:
            self.hi_res_audio_time = self._current_time

        evaluate = should_evaluate(self.evaluate_on_seek, self._is_playing)
        self._notify("sequence_current_time_changed", self.prev_time, evaluate)
        self.prev_time = self._current_time

    def set_total_time(self, value: float) -> None:
        """Change the sequence length (at least one second)."""
        value = max(float(value), MIN_SEQUENCE_TIME)
        if value == self._total_time:
            return
        self._total_time = value
        self._set_current_value(self._current_time)
        self._view_start_range = (0.0, value - self.min_view_time)
        self._set_view_start(self._view_start)
        self._notify("sequence_total_time_changed")

    def set_play_speed(self, value: float) -> None:
        """Change the play speed factor; negative plays backwards."""
        value = float(value)
        if value == self._play_speed:
            return
        self._play_speed = value
        if (self._prev_speed < 0 < value) or (self._prev_speed > 0 > value):
            self._notify("sequence_play_direction_changed")
        self._prev_speed = value
        self._notify("sequence_play_speed_changed")
        self._update_steps()

    def set_fps(self, value: int) -> None:
        """Change the evaluation rate, clamped to 1..500."""
        value = int(_limit(MIN_FPS, MAX_FPS, int(value)))
        if value == self._fps:
            return
        self._fps = value
        self._update_steps()

    def _update_steps(self) -> None:
        self.unit_steps = frames_per_second_step(self._fps, self._play_speed)
        self.set_current_time(self._current_time)

    # ---- view ------------------------------------------------------------

    def set_view(self, start: float, end: float) -> None:
        """Set the visible time range, keeping at least the minimum view time."""
        self._set_view_start(start)
        self._set_view_end(end)

    def _set_view_start(self, value: float) -> None:
        low, high = self._view_start_range
        self._view_start = _limit(low, high, float(value))
        self._view_end_range = (self._view_start + self.min_view_time, self._total_time)
        self._set_view_end(self._view_end)

    def _set_view_end(self, value: float) -> None:
        low, high = self._view_end_range
        self._view_end = _limit(low, high, float(value))

    # ---- transport -------------------------------------------------------

    def _set_playing(self, value: bool) -> None:
        if value == self._is_playing:
            return
        self._is_playing = value
        if value:
            if self._current_time >= self._total_time:
                self.hi_res_audio_time = 0.0
                self.set_current_time(0.0, True, True)
            self.prev_time = self._current_time
            self.target_time = self._current_time
            self.follow_view_range = self._view_end - self._view_start
        self._notify("sequence_play_state_changed")

    def play(self) -> None:
        """Start playing; from the start if the playhead is at the end."""
        self._set_playing(True)

    def stop(self) -> None:
        """Stop playing and return to the start."""
        self._set_playing(False)
        self.set_current_time(0.0, True, True)

    def pause(self) -> None:
        """Stop playing and keep the current time."""
        self._set_playing(False)

    def finish(self) -> None:
        """Stop after naturally reaching the end."""
        self._set_playing(False)
        self._notify("sequence_finished")

    def toggle_play(self) -> None:
        """Pause when playing, play otherwise."""
        if self._is_playing:
            self.pause()
        else:
            self.play()

    # ---- cues ------------------------------------------------------------

    def add_cue(self, cue: Cue) -> Cue:
        """Add a cue to the sequence and return it."""
        self.cues.append(cue)
        return cue

    def _sorted_cues(self) -> list[Cue]:
        return sorted(self.cues, key=lambda c: c.time)

    def _cues_in_timespan(
        self, low: float, high: float, include_low: bool, include_high: bool
    ) -> list[Cue]:
        return [
            cue
            for cue in self._sorted_cues()
            if (low < cue.time or (include_low and cue.time == low))
            and (cue.time < high or (include_high and cue.time == high))
        ]

    def next_cue(self) -> None:
        """Jump to the first cue after the current time, or to the end."""
        target = next(
            (c.time for c in self._sorted_cues() if c.time > self._current_time),
            self._total_time,
        )
        self.set_current_time(target, True, True)

    def prev_cue(self) -> None:
        """Jump to the previous cue, skipping one less than a second back."""
        earlier = [
            c.time
            for c in self._sorted_cues()
            if self._current_time - c.time >= _PREV_CUE_THRESHOLD
        ]
        self.set_current_time(earlier[-1] if earlier else 0.0, True, True)

    def handle_cue_action(self, cue: Cue | None, origin_cue: Cue | None = None) -> None:
        """Perform the action of a cue the playhead has reached."""
        if cue is None or not cue.is_active:
            return
        if origin_cue is None:
            origin_cue = cue

        if cue.action is CueAction.PAUSE:
            self.pause()
            self.prev_time = self._current_time
            self.set_current_time(cue.time)
        elif cue.action is CueAction.LOOP_JUMP:
            target = cue.loop_target
            if target is not None and target is not cue and target is not origin_cue:
                self.set_current_time(target.time, True, True)
                self.handle_cue_action(target, origin_cue)

    # ---- frames ----------------------------------------------------------

    def get_frame_for_time(
        self, time: float, force_direction: bool = False, force_prev: bool = True
    ) -> int:
        return get_frame_for_time(time, self._fps, self._play_speed, force_direction, force_prev)

    def get_time_for_frame(self, frame: float) -> float:
        return get_time_for_frame(frame, self._fps, self._play_speed)

    def get_next_frame_time_for_time(self, time: float) -> float:
        return get_next_frame_time_for_time(time, self._fps, self._play_speed)

    def get_prev_frame_time_for_time(self, time: float) -> float:
        return get_prev_frame_time_for_time(time, self._fps, self._play_speed)

    # ---- editing ---------------------------------------------------------

    def set_being_edited(self, value: bool) -> None:
        """Mark the sequence as open in an editor."""
        if self.is_being_edited == value:
            return
        self.is_being_edited = value
        self._notify("sequence_editing_state_changed")

    def get_snap_times(
        self, start: float = 0.0, end: float = -1.0, exclude_values: Iterable[float] = ()
    ) -> list[float]:
        """Times that moved items may snap to."""
        if end == -1:
            end = self._total_time

        times: list[float] = []

        def add(value: float) -> None:
            if value not in times:
                times.append(value)

        for cue in self.cues:
            add(cue.time)
        add(self._current_time)

        if self.bpm_preview_enabled:
            for beat in beat_times(start, end, self.bpm_preview):
                add(beat)

        excluded = set(exclude_values)
        times = [t for t in times if t not in excluded]
        if start > 0 or end < self._total_time:
            times = [t for t in times if not start <= t <= end]
        return times

    # ---- clocks ----------------------------------------------------------

    def advance(self, delta_seconds: float) -> None:
        """Run one playback tick of ``delta_seconds`` of wall-clock time."""
        if not self._is_playing:
            return

        self.target_time += delta_seconds * self._play_speed
        if not self.is_seeking:
            self.set_current_time(self.target_time)

        if self.view_follow_time:
            span = self.follow_view_range
            target_start = max(self._current_time - span / 2, 0.0)
            target_end = target_start + span
            if target_end > self._total_time:
                target_end = self._total_time
                target_start = target_end - span
            self._set_view_start(
                self._view_start + (target_start - self._view_start) * _VIEW_FOLLOW_LERP
            )
            self._set_view_end(
                self._view_end + (target_end - self._view_end) * _VIEW_FOLLOW_LERP
            )

        if self.target_time >= self._total_time:
            if self.loop:
                offset = self.target_time - self._total_time
                self._notify("sequence_looped")
                self.prev_time = 0.0
                self.set_current_time(offset, True, True)
            else:
                self.finish()

    def audio_block(self, num_samples: int) -> float:
        """Account for an audio block; returns the audio-driven time."""
        if self._is_playing:
            self.hi_res_audio_time += (num_samples / self.sample_rate) * self._play_speed
        return self.hi_res_audio_time

    # ---- persistence -----------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialise the sequence settings and cues."""
        parameters: dict[str, Any] = {
            "startAtLoad": self.start_at_load,
            "includeCurrentTimeInSave": self.include_current_time_in_save,
            "totalTime": self._total_time,
            "playSpeed": self._play_speed,
            "fps": self._fps,
            "loop": self.loop,
            "autoSnap": self.auto_snap,
            "evaluateOnSeek": self.evaluate_on_seek.value,
            "bpmPreview": self.bpm_preview,
            "bpmPreviewEnabled": self.bpm_preview_enabled,
            "beatsPerBar": self.beats_per_bar,
            "viewStartTime": self._view_start,
            "viewEndTime": self._view_end,
            "minViewTime": self.min_view_time,
            "viewFollowTime": self.view_follow_time,
        }
        if self.include_current_time_in_save:
            parameters["currentTime"] = self._current_time

        index = {id(cue): i for i, cue in enumerate(self.cues)}
        cues = [
            {
                "time": cue.time,
                "name": cue.name,
                "action": cue.action.value,
                "enabled": cue.enabled,
                "loopTarget": index.get(id(cue.loop_target)) if cue.loop_target else None,
            }
            for cue in self.cues
        ]
        data: dict[str, Any] = {
            "type": "Sequence",
            "niceName": self.name,
            "parameters": parameters,
            "cues": cues,
        }
        if self.is_being_edited:
            data["editing"] = True
        return data

    def load_dict(self, data: dict[str, Any]) -> None:
        """Restore settings and cues written by :meth:`to_dict`."""
        self.name = data.get("niceName", self.name)
        params = data.get("parameters", {})

        self.include_current_time_in_save = params.get(
            "includeCurrentTimeInSave", self.include_current_time_in_save
        )
        self.start_at_load = params.get("startAtLoad", self.start_at_load)
        self.loop = params.get("loop", self.loop)
        self.auto_snap = params.get("autoSnap", self.auto_snap)
        if "evaluateOnSeek" in params:
            self.evaluate_on_seek = EvaluateMode(params["evaluateOnSeek"])
        self.bpm_preview = params.get("bpmPreview", self.bpm_preview)
        self.bpm_preview_enabled = params.get("bpmPreviewEnabled", self.bpm_preview_enabled)
        self.beats_per_bar = params.get("beatsPerBar", self.beats_per_bar)
        self.min_view_time = params.get("minViewTime", self.min_view_time)
        self.view_follow_time = params.get("viewFollowTime", self.view_follow_time)

        if "totalTime" in params:
            self.set_total_time(params["totalTime"])
        if "fps" in params:
            self.set_fps(params["fps"])
        if "playSpeed" in params:
            self.set_play_speed(params["playSpeed"])
        self.set_view(
            params.get("viewStartTime", self._view_start),
            params.get("viewEndTime", self._view_end),
        )
        if self.include_current_time_in_save and "currentTime" in params:
            self.set_current_time(params["currentTime"], True, True)

        if "cues" in data:
            raw = data["cues"]
            cues = [
                Cue(
                    time=float(item["time"]),
                    name=item.get("name", ""),
                    action=CueAction(item.get("action", CueAction.NOTHING.value)),
                    enabled=item.get("enabled", True),
                )
                for item in raw
            ]
            for cue, item in zip(cues, raw):
                target = item.get("loopTarget")
                if target is not None:
                    cue.loop_target = cues[target]
            self.cues = cues

        self.is_being_edited = bool(data.get("editing", False))

        if self.start_at_load:
            self.play()