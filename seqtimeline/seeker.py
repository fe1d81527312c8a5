"""Overview strip of a whole sequence: a draggable handle over the view range."""

from __future__ import annotations

from typing import Callable

from seqtimeline.sequence import Sequence

MIN_ACTION_DIST_X = 10.0
MIN_ACTION_DIST_Y = 15.0
ZOOM_SENSITIVITY = 0.002
_PAN_OVERRIDE_DIST = 20.0

SeekerListener = Callable[[bool], None]


def _jmap(value: float, source_min: float, source_max: float,
          target_min: float, target_max: float) -> float:
    return target_min + (value - source_min) * (target_max - target_min) / (source_max - source_min)


def _dead_zone(offset: float, dist: float) -> float:
    """Shrink an offset towards zero by ``dist``, never crossing zero."""
    if offset < 0:
        return min(offset + dist, 0.0)
    return max(offset - dist, 0.0)


class TimelineSeeker:
    """Maps the full sequence length onto ``width`` pixels and edits the view.

    Listeners are callables told whether the seeker is being manipulated.
    """

    def __init__(self, sequence: Sequence, width: int = 100) -> None:
        self.sequence = sequence
        self.width = width
        self.selection_span: tuple[float, float] = (0.0, 0.0)
        self._listeners: list[SeekerListener] = []
        self.view_start_at_mouse_down = sequence.view_start
        self.view_end_at_mouse_down = sequence.view_end
        self.time_anchor_at_mouse_down = sequence.view_start
        self.view_time_at_mouse_down = sequence.view_end - sequence.view_start

    # ---- listeners -------------------------------------------------------

    def add_listener(self, listener: SeekerListener) -> None:
        """Register a manipulation listener; registering twice has no effect."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: SeekerListener) -> None:
        """Unregister a listener; unknown listeners are ignored."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, is_manipulating: bool) -> None:
        for listener in list(self._listeners):
            listener(is_manipulating)

    # ---- coordinates -----------------------------------------------------

    def get_x_for_time(self, time: float) -> int:
        """Pixel position of a time across the whole sequence."""
        return int(_jmap(time, 0.0, self.sequence.total_time, 0.0, float(self.width)))

    def get_time_for_x(self, x: float) -> float:
        """Time under a pixel across the whole sequence."""
        if self.width <= 0:
            return 0.0
        return _jmap(float(x), 0.0, float(self.width), 0.0, self.sequence.total_time)

    def handle_bounds(self) -> tuple[int, int]:
        """Left and right pixel edges of the handle showing the view range."""
        return (
            self.get_x_for_time(self.sequence.view_start),
            self.get_x_for_time(self.sequence.view_end),
        )

    # ---- mouse -----------------------------------------------------------

    def _follow_playing(self) -> bool:
        return self.sequence.is_playing and self.sequence.view_follow_time

    def _apply_view(self, start: float, end: float) -> None:
        if self._follow_playing():
            self.sequence.follow_view_range = end - start
        else:
            self.sequence.set_view(start, end)

    def mouse_down(self, x: int, left: bool = True, right: bool = False) -> None:
        """Start a zoom selection (right) or a handle/track drag (left)."""
        if right:
            pos = self.get_time_for_x(x)
            self.selection_span = (pos, pos)
        elif left:
            self.view_start_at_mouse_down = self.sequence.view_start
            self.view_end_at_mouse_down = self.sequence.view_end
            self.time_anchor_at_mouse_down = self.get_time_for_x(x)
            self.view_time_at_mouse_down = (
                self.view_end_at_mouse_down - self.view_start_at_mouse_down
            )
        self._notify(True)

    def drag_handle(self, offset_x: float, offset_y: float,
                    shift: bool = False, alt: bool = False) -> None:
        """Pan (horizontal) and zoom (vertical) by dragging the handle.

        Offsets are pixels from where the mouse went down.
        """
        offset_x = _dead_zone(float(offset_x), MIN_ACTION_DIST_X)
        offset_y = _dead_zone(float(offset_y), MIN_ACTION_DIST_Y)

        offset_y *= self.sequence.total_time
        if shift:
            offset_y *= 2
        if alt:
            offset_y /= 2
        offset_y *= ZOOM_SENSITIVITY

        if self.view_time_at_mouse_down == 0:
            return
        factor = (self.view_time_at_mouse_down - offset_y) / self.view_time_at_mouse_down
        if factor == 0:
            return

        anchor = self.time_anchor_at_mouse_down
        start_dist = anchor - self.view_start_at_mouse_down
        end_dist = anchor - self.view_end_at_mouse_down
        pan = self.get_time_for_x(offset_x)
        new_start = anchor - start_dist * factor + pan
        new_end = anchor - end_dist * factor + pan

        if new_end - new_start >= self.sequence.min_view_time or abs(offset_x) > _PAN_OVERRIDE_DIST:
            self._apply_view(new_start, new_end)

    def drag_track(self, x: int) -> None:
        """Centre the view on the time under ``x``, keeping its length."""
        if self._follow_playing():
            return
        dest = self.get_time_for_x(x)
        half = self.view_time_at_mouse_down / 2
        self.sequence.set_view(dest - half, dest + half)

    def drag_selection(self, x: int) -> None:
        """Extend the zoom selection to the time under ``x``."""
        self.selection_span = (self.selection_span[0], self.get_time_for_x(x))

    def mouse_up(self, right: bool = False, dragged: bool = False) -> None:
        """Finish a gesture; a right click zooms to the selection or to all."""
        if right:
            start, end = 0.0, self.sequence.total_time
            if dragged:
                first, second = self.selection_span
                start, end = min(first, second), max(first, second)
            self.selection_span = (0.0, 0.0)
            self._apply_view(start, end)
        self._notify(False)