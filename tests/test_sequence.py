import pytest

from seqtimeline import timing
from seqtimeline.sequence import Sequence, SequenceListener
from seqtimeline.timing import Cue, CueAction, EvaluateMode


class Recorder(SequenceListener):
    def __init__(self):
        self.events = []
        self.time_changes = []

    def sequence_play_state_changed(self, sequence):
        self.events.append(("play", sequence.is_playing))

    def sequence_current_time_changed(self, sequence, prev_time, evaluate):
        self.time_changes.append((prev_time, sequence.current_time, evaluate))

    def sequence_finished(self, sequence):
        self.events.append(("finished",))

    def sequence_looped(self, sequence):
        self.events.append(("looped",))

    def sequence_play_speed_changed(self, sequence):
        self.events.append(("speed", sequence.play_speed))

    def sequence_play_direction_changed(self, sequence):
        self.events.append(("direction",))

    def sequence_total_time_changed(self, sequence):
        self.events.append(("total", sequence.total_time))

    def sequence_editing_state_changed(self, sequence):
        self.events.append(("editing", sequence.is_being_edited))


@pytest.fixture
def seq():
    return Sequence()


@pytest.fixture
def recorder(seq):
    rec = Recorder()
    seq.add_listener(rec)
    return rec


def test_defaults(seq):
    assert seq.total_time == 30
    assert seq.fps == 50
    assert seq.current_time == 0
    assert (seq.view_start, seq.view_end) == (0, 30)
    assert not seq.is_playing


def test_set_current_time_clamps(seq):
    seq.set_current_time(100)
    assert seq.current_time == seq.total_time
    seq.set_current_time(-5)
    assert seq.current_time == 0


def test_set_current_time_ignored_while_playing_without_force(seq):
    seq.play()
    seq.set_current_time(4, force_over_playing=False)
    assert seq.current_time == 0
    seq.set_current_time(4, force_over_playing=True)
    assert seq.current_time == 4


def test_play_from_end_restarts(seq):
    seq.set_current_time(seq.total_time)
    seq.play()
    assert seq.is_playing
    assert seq.current_time == 0


def test_stop_resets_and_notifies(seq, recorder):
    seq.set_current_time(7)
    seq.play()
    seq.stop()
    assert not seq.is_playing
    assert seq.current_time == 0
    assert recorder.events == [("play", True), ("play", False)]


def test_pause_keeps_time(seq):
    seq.set_current_time(7)
    seq.play()
    seq.pause()
    assert not seq.is_playing
    assert seq.current_time == 7


def test_toggle_play(seq):
    seq.toggle_play()
    assert seq.is_playing
    seq.toggle_play()
    assert not seq.is_playing


def test_total_time_has_minimum_and_clamps_current(seq, recorder):
    seq.set_current_time(20)
    seq.set_total_time(0.2)
    assert seq.total_time == 1.0
    assert seq.current_time == seq.total_time
    assert ("total", seq.total_time) in recorder.events


def test_play_speed_direction_events(seq, recorder):
    seq.set_play_speed(2)
    seq.set_play_speed(-1)
    assert recorder.events == [("speed", 2), ("direction",), ("speed", -1)]


def test_fps_is_clamped(seq):
    seq.set_fps(0)
    assert seq.fps == 1
    seq.set_fps(1000)
    assert seq.fps == 500


def test_frame_helpers_follow_settings(seq):
    seq.set_fps(25)
    seq.set_play_speed(2)
    assert seq.get_frame_for_time(1.3) == timing.get_frame_for_time(1.3, 25, 2)
    assert seq.get_time_for_frame(10) == timing.get_time_for_frame(10, 25, 2)
    assert seq.get_next_frame_time_for_time(1.3) >= 1.3
    assert seq.get_prev_frame_time_for_time(1.3) <= 1.3


def test_advance_moves_playhead(seq):
    seq.play()
    seq.advance(1.0)
    assert seq.current_time == 1.0
    seq.set_play_speed(2)
    seq.advance(1.0)
    assert seq.current_time == 3.0


def test_advance_does_nothing_when_stopped(seq):
    seq.advance(5.0)
    assert seq.current_time == 0


def test_reaching_end_finishes(seq, recorder):
    seq.play()
    seq.advance(seq.total_time + 1)
    assert not seq.is_playing
    assert seq.current_time == seq.total_time
    assert ("finished",) in recorder.events


def test_reaching_end_loops(seq, recorder):
    seq.loop = True
    seq.play()
    seq.advance(seq.total_time + 1)
    assert seq.is_playing
    assert seq.current_time == 0
    assert ("looped",) in recorder.events


def test_pause_cue_stops_at_cue(seq):
    cue = seq.add_cue(Cue(time=5, action=CueAction.PAUSE))
    seq.play()
    seq.advance(6)
    assert not seq.is_playing
    assert seq.current_time == cue.time


def test_disabled_cue_is_ignored(seq):
    seq.add_cue(Cue(time=5, action=CueAction.PAUSE, enabled=False))
    seq.play()
    seq.advance(6)
    assert seq.is_playing
    assert seq.current_time == 6


def test_loop_jump_cue(seq):
    start = seq.add_cue(Cue(time=2, name="start"))
    seq.add_cue(Cue(time=8, action=CueAction.LOOP_JUMP, loop_target=start))
    seq.set_current_time(7)
    seq.play()
    seq.advance(2)
    assert seq.is_playing
    assert seq.current_time == start.time


def test_next_and_prev_cue(seq):
    seq.add_cue(Cue(time=3))
    seq.add_cue(Cue(time=10))
    seq.next_cue()
    assert seq.current_time == 3
    seq.next_cue()
    assert seq.current_time == 10
    seq.set_current_time(10.5)
    seq.prev_cue()
    assert seq.current_time == 3
    seq.prev_cue()
    assert seq.current_time == 0


def test_evaluate_flag_follows_mode(seq, recorder):
    seq.evaluate_on_seek = EvaluateMode.ALWAYS
    seq.set_current_time(4)
    seq.evaluate_on_seek = EvaluateMode.NEVER
    seq.set_current_time(6)
    assert recorder.time_changes == [(0, 4, True), (4, 6, False)]


def test_being_edited_notifies_once(seq, recorder):
    seq.set_being_edited(True)
    seq.set_being_edited(True)
    assert recorder.events == [("editing", True)]


def test_removed_listener_not_called(seq, recorder):
    seq.remove_listener(recorder)
    seq.play()
    assert recorder.events == []


def test_snap_times_include_cues_and_current(seq):
    seq.add_cue(Cue(time=4))
    seq.set_current_time(9)
    snaps = seq.get_snap_times()
    assert sorted(snaps) == [4, 9]
    assert seq.get_snap_times(exclude_values=[4]) == [9]


def test_snap_times_with_bpm(seq):
    seq.bpm_preview_enabled = True
    seq.bpm_preview = 60
    snaps = seq.get_snap_times()
    assert len(snaps) == len(set(snaps))
    assert set(timing.beat_times(0, seq.total_time, 60)) <= set(snaps)


def test_set_view_keeps_minimum_range(seq):
    seq.set_view(10, 10.5)
    assert seq.view_start == 10
    assert seq.view_end == seq.view_start + seq.min_view_time


def test_audio_block(seq):
    assert seq.audio_block(44100) == 0
    seq.play()
    assert seq.audio_block(44100) == 1.0


def test_round_trip(seq):
    seq.loop = True
    seq.set_total_time(42)
    seq.set_fps(25)
    seq.evaluate_on_seek = EvaluateMode.ALWAYS
    a = seq.add_cue(Cue(time=2, name="a"))
    seq.add_cue(Cue(time=8, name="b", action=CueAction.LOOP_JUMP, loop_target=a))
    seq.set_being_edited(True)
    data = seq.to_dict()

    other = Sequence()
    other.load_dict(data)
    assert other.to_dict() == data
    assert other.cues[1].loop_target is other.cues[0]
    assert other.is_being_edited


def test_current_time_saved_only_when_requested(seq):
    seq.set_current_time(5)
    assert "currentTime" not in seq.to_dict()["parameters"]
    seq.include_current_time_in_save = True
    other = Sequence()
    other.load_dict(seq.to_dict())
    assert other.current_time == 5


def test_load_start_at_load_plays(seq):
    seq.start_at_load = True
    other = Sequence()
    other.load_dict(seq.to_dict())
    assert other.is_playing


def test_load_invalid_evaluate_mode(seq):
    data = seq.to_dict()
    data["parameters"]["evaluateOnSeek"] = "Sometimes"
    with pytest.raises(ValueError):
        Sequence().load_dict(data)