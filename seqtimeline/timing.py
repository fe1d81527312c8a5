"""Frame, snap and beat arithmetic shared by sequences and their views."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

# Snapping starts from this distance, so any candidate closer than it wins.
_MAX_SNAP_DISTANCE = float(2**31 - 1)


class EvaluateMode(Enum):
    """When data such as time triggers is evaluated during a manual seek."""

    NEVER = "Never"
    ONLY_PLAYING = "When Playing Only"
    ONLY_NOT_PLAYING = "When Not Playing"
    ALWAYS = "Always"


class CueAction(Enum):
    """What a sequence does when its playhead reaches a cue."""

    NOTHING = "Nothing"
    PAUSE = "Pause"
    LOOP_JUMP = "Loop Jump"


@dataclass(eq=False)
class Cue:
    """A named marker in time, with an optional action and jump target."""

    time: float
    name: str = ""
    action: CueAction = CueAction.NOTHING
    enabled: bool = True
    loop_target: Cue | None = None

    @property
    def is_active(self) -> bool:
        """Whether the cue currently takes part in playback."""
        return self.enabled


def frames_per_second_step(fps: float, play_speed: float) -> float:
    """Frames per second of sequence time, taking the play speed into account.

    A play speed of zero counts as normal speed.
    """
    return fps / (play_speed if play_speed != 0 else 1.0)


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def get_frame_for_time(
    time: float,
    fps: float,
    play_speed: float = 1.0,
    force_direction: bool = False,
    force_prev: bool = True,
) -> int:
    """Frame index for a time.

    Without a forced direction the nearest frame is returned (halves round
    away from zero); otherwise the frame at or before (``force_prev``) or at
    or after the time.
    """
    frame = time * frames_per_second_step(fps, play_speed)
    if force_direction:
        return math.floor(frame) if force_prev else math.ceil(frame)
    return _round_half_away(frame)


def get_time_for_frame(frame: float, fps: float, play_speed: float = 1.0) -> float:
    """Time at which a frame starts."""
    return frame / frames_per_second_step(fps, play_speed)


def get_next_frame_time_for_time(time: float, fps: float, play_speed: float = 1.0) -> float:
    """Time of the first frame at or after ``time``."""
    return get_time_for_frame(
        get_frame_for_time(time, fps, play_speed, True, False), fps, play_speed
    )


def get_prev_frame_time_for_time(time: float, fps: float, play_speed: float = 1.0) -> float:
    """Time of the last frame at or before ``time``."""
    return get_time_for_frame(
        get_frame_for_time(time, fps, play_speed, True, True), fps, play_speed
    )


def get_closest_snap_time_for(snap_times: Iterable[float], time: float) -> float:
    """The snap time nearest to ``time``; the first one wins a tie.

    With no snap times, ``time`` itself is returned.
    """
    result = time
    best = _MAX_SNAP_DISTANCE
    for candidate in snap_times:
        distance = abs(time - candidate)
        if distance < best:
            best = distance
            result = candidate
    return result


def should_evaluate(mode: EvaluateMode, is_playing: bool) -> bool:
    """Whether a change of current time should evaluate skipped data."""
    if mode is EvaluateMode.ALWAYS:
        return True
    if mode is EvaluateMode.ONLY_PLAYING:
        return is_playing
    if mode is EvaluateMode.ONLY_NOT_PLAYING:
        return not is_playing
    return False


def beat_times(start: float, end: float, bpm: float) -> list[float]:
    """Beat positions from ``start`` (inclusive) up to ``end`` (exclusive)."""
    if bpm <= 0:
        raise ValueError(f"bpm must be positive, got {bpm}")
    step = 60.0 / bpm
    times: list[float] = []
    current = start
    while current < end:
        times.append(current)
        current += step
    return times