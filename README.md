# seqtimeline

A small library with no dependencies for modelling timed sequences. It covers
the playback transport, cue points, frame quantisation and snapping. It also
holds the input logic behind a timeline editor: the editor view, the time
ruler header and the overview seeker. None of it draws anything.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

- `seqtimeline.timing` holds pure helpers:
  - `frames_per_second_step`, `get_frame_for_time` and `get_time_for_frame`
  - `get_next_frame_time_for_time` and `get_prev_frame_time_for_time`
  - `get_closest_snap_time_for`, `should_evaluate` and `beat_times`
  - the `EvaluateMode` and `CueAction` enums, and the `Cue` dataclass, which
    has a time, a name, an action, an enabled flag and an optional
    `loop_target`.
- `seqtimeline.sequence` holds `Sequence` and `SequenceListener`.
  - A `Sequence` has a current time and a total time, a play speed, an FPS
    value and a loop flag.
  - It also has a view range, cues, BPM preview settings and listeners.
  - Transport: `play`, `stop`, `pause`, `finish` and `toggle_play`.
  - Cues: `add_cue`, `next_cue` and `prev_cue`. Cue actions are pause and loop
    jump.
  - Snapping: `get_snap_times`.
  - Persistence to and from plain dicts: `to_dict` and `load_dict`.
- `seqtimeline.manager` holds `SequenceManager`, a collection of sequences.
  - `play_all` and `stop_all` act on every sequence.
  - The `only_one_sequence_playing` option stops the others when one starts.
  - `is_one_sequence_playing` tracks whether any sequence is playing.
  - Picker entries: `sequence_menu` and `cue_menu`.
  - Lookup of what an entry picked: `get_sequence_for_item_id` and
    `get_cue_for_item_id`.
- `seqtimeline.editor` holds `SequenceEditor`, which marks a sequence as being
  edited while it is open. It can be used as a context manager.
  - Wheel zoom and scroll: `mouse_wheel_move`.
  - Pinch zoom: `mouse_magnify`.
  - Home and End keys: `key_pressed` with `Key`.
  - Panel resizing: `grabber_grab_update`.
- `seqtimeline.header` holds `TimelineHeader`.
  - It maps times to pixels and back, snapped to frame steps.
  - It lists the visible minute, second and frame ticks (`time_ticks`) and the
    BPM preview beats (`beat_marks`).
  - It seeks with optional snapping.
  - It selects ranges, which either zoom the view or are returned for
    `apply_span_action` with a `SpanAction`.
- `seqtimeline.seeker` holds `TimelineSeeker`, the overview strip. Dragging its
  handle pans and zooms the visible range. A right-click or right-drag zooms to
  the whole sequence or to a selection. Listeners are told when a gesture
  starts and ends.

## Example

```python
from seqtimeline.sequence import Sequence
from seqtimeline.timing import Cue

seq = Sequence("Intro", total_time=30, fps=50)
seq.add_cue(Cue(time=10.0))
seq.play()
seq.advance(0.5)          # move playback forward by half a second
print(seq.current_time)   # 0.5
seq.next_cue()            # jump to the cue at 10 s
seq.stop()                # back to 0
```

## What it does not do

- **No clock.** Playback runs no thread and no timer. Time moves only when you
  call `Sequence.advance` with the elapsed wall-clock seconds, or
  `Sequence.audio_block` when the sequence is audio-driven.
- **No audio.** There is no audio device, metronome or audio file handling.
- **No layers.** A sequence holds cues only. There are no layers, clips or
  automation. Snapping, span actions and picker menus work on cues alone.
- **No undo.** Span actions edit the cues at once.
- **No user interface.** There are no windows, widgets, popup menus or
  painting. The header and seeker compute positions and state for a UI to use.
- **No files or command.** The package reads and writes no files and has no
  command-line program. `to_dict` and `load_dict` give plain data; storing it
  is up to the caller.