"""Editing state of a sequence: panel layout, zooming, scrolling and keys."""

from __future__ import annotations

from enum import Enum, auto

from seqtimeline.sequence import Sequence

DEFAULT_PANEL_WIDTH = 250
HEADER_HEIGHT = 60
HEADER_HEIGHT_WITH_BPM = 70


class Key(Enum):
    """Keys the editor reacts to."""

    HOME = auto()
    END = auto()
    OTHER = auto()


class SequenceEditor:
    """Holds a sequence open for editing and maps input to view changes."""

    def __init__(self, sequence: Sequence) -> None:
        self.sequence = sequence
        self.panel_width = DEFAULT_PANEL_WIDTH
        self.closed = False
        sequence.set_being_edited(True)

    def __enter__(self) -> SequenceEditor:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def header_height(self) -> int:
        """Header height; taller when the BPM preview row is shown."""
        return HEADER_HEIGHT_WITH_BPM if self.sequence.bpm_preview_enabled else HEADER_HEIGHT

    def close(self) -> None:
        """Stop editing the sequence."""
        if self.closed:
            return
        self.closed = True
        self.sequence.set_being_edited(False)

    def _follow_playing(self) -> bool:
        return self.sequence.is_playing and self.sequence.view_follow_time

    def mouse_wheel_move(
        self,
        delta_x: float,
        delta_y: float,
        time: float = 0.0,
        shift: bool = False,
        command: bool = False,
    ) -> None:
        """Zoom around ``time`` (vertical wheel with shift) or scroll the view."""
        seq = self.sequence
        if delta_y != 0 and not command and shift:
            view_start = seq.view_start
            view_range = seq.view_end - view_start
            zoom = delta_y * view_range
            diff = (time - view_start) / view_range
            new_start = view_start + zoom * diff
            new_end = seq.view_end - zoom * (1 - diff)
            if new_end - new_start >= seq.min_view_time:
                if self._follow_playing():
                    seq.follow_view_range = new_end - new_start
                else:
                    seq.set_view(new_start, seq.view_end)
                    seq.set_view(seq.view_start, new_end)

        if delta_x != 0 or (delta_y != 0 and command):
            wheel = delta_y if delta_x == 0 else delta_x
            span = seq.view_end - seq.view_start
            new_start = min(seq.view_start - span * wheel, seq.total_time - span)
            seq.set_view(new_start, seq.view_end)
            seq.set_view(seq.view_start, seq.view_start + span)

    def mouse_magnify(self, scale_factor: float) -> None:
        """Pinch zoom: shrink (or grow) the view equally on both sides."""
        seq = self.sequence
        zoom = scale_factor * (seq.view_end - seq.view_start) / 2
        seq.set_view(seq.view_start + zoom, seq.view_end)
        seq.set_view(seq.view_start, seq.view_end - zoom)

    def key_pressed(self, key: Key) -> bool:
        """Home jumps to the start, End to the end; never consumes the key."""
        if key is Key.HOME:
            self.sequence.set_current_time(0.0, True, False)
        elif key is Key.END:
            self.sequence.set_current_time(self.sequence.total_time, True, False)
        return False

    def grabber_grab_update(self, relative_dist: int) -> None:
        """Resize the layer panel by dragging the gap grabber."""
        self.panel_width += relative_dist