import pytest

from editorial_player.application.commands import (
    SeekRelative,
    SetPlaybackRate,
    ToggleFullscreen,
    TogglePlayPause,
    ToggleSpeedMenu,
)
from editorial_player.application.ports import KeyEvent
from editorial_player.domain.session_state import PlaybackStatus
from editorial_player.domain.time_format import format_timestamp


class _Widget:
    def __init__(self, widget_class="Frame", master=None):
        self._class = widget_class
        self.master = master

    def winfo_class(self):
        return self._class


def _started(make_coordinator, **kwargs):
    coordinator = make_coordinator(**kwargs)
    coordinator.start()
    return coordinator


def test_start_subscribes_once_and_close_releases_everything(
    make_coordinator, element, fullscreen, key_source, logger
):
    coordinator = make_coordinator()

    coordinator.start()
    coordinator.start()

    assert coordinator.started is True
    assert element.listeners == [coordinator.bridge]
    assert len(fullscreen.callbacks) == 1
    assert len(key_source.handlers) == 1

    coordinator.close()
    coordinator.close()

    assert coordinator.started is False
    assert element.listeners == []
    assert fullscreen.callbacks == []
    assert key_source.handlers == []
    assert logger.infos[-1].startswith("Playback session closed")


def test_failed_start_rolls_back_acquired_subscriptions(
    make_coordinator, element, fullscreen, key_source, logger
):
    key_source.fail_subscribe = True
    coordinator = make_coordinator()

    with pytest.raises(RuntimeError):
        coordinator.start()

    assert coordinator.started is False
    assert element.listeners == []
    assert fullscreen.callbacks == []
    assert logger.exceptions == ["Failed to subscribe player event sources"]


def test_context_manager_runs_the_lifecycle(make_coordinator, element):
    with make_coordinator() as coordinator:
        assert coordinator.started is True
    assert element.listeners == []


def test_start_reads_current_fullscreen_state(make_coordinator, fullscreen):
    fullscreen.active = True

    coordinator = _started(make_coordinator)

    assert coordinator.state.fullscreen is True


def test_no_source_session_is_inert(make_coordinator, element, key_source, scheduler):
    coordinator = make_coordinator(source="")
    seen = []
    coordinator.add_observer(seen.append)

    coordinator.start()
    assert coordinator.dispatch(TogglePlayPause()) is False
    assert coordinator.handle_key(KeyEvent(key="space")) is False
    coordinator.on_pointer_move()
    coordinator.on_pointer_leave()

    assert coordinator.started is False
    assert element.calls == []
    assert key_source.handlers == []
    assert scheduler.pending == {}
    assert seen == []
    assert coordinator.state.playback is PlaybackStatus.IDLE


def test_missing_element_is_treated_as_no_source(make_coordinator):
    coordinator = make_coordinator(element=None)

    assert coordinator.has_source is False
    assert coordinator.dispatch(TogglePlayPause()) is False


def test_key_space_toggles_play_and_is_consumed(make_coordinator, key_source, element):
    coordinator = _started(make_coordinator)

    assert key_source.press(KeyEvent(key="space")) == [True]
    assert coordinator.state.is_playing is True
    assert key_source.press(KeyEvent(key="k")) == [True]
    assert coordinator.state.is_playing is False
    assert element.calls == [("play",), ("pause",)]


def test_keys_typed_in_editor_leave_player_untouched(make_coordinator, key_source, element):
    coordinator = _started(make_coordinator)
    editor = _Widget("Frame")
    coordinator.policy.register_region(editor)
    editor_text = _Widget("Text", master=editor)
    before = coordinator.state

    results = [
        key_source.press(KeyEvent(key=key, target=editor_text))
        for key in (" ", "k", "Left", "Right", "Up", "Down", "f", "m")
    ]

    assert results == [[False]] * 8
    assert coordinator.state == before
    assert element.calls == []


def test_metadata_updates_duration_label(make_coordinator, element):
    coordinator = _started(make_coordinator)
    (listener,) = element.listeners

    listener.on_metadata_ready(125.4)
    listener.on_progress(65)

    state = coordinator.state
    assert state.duration_seconds == 125.4
    assert format_timestamp(state.current_time_seconds) == "1:05"
    assert format_timestamp(state.duration_seconds) == "2:05"


def test_seek_clamps_at_both_ends(make_coordinator, element):
    coordinator = _started(make_coordinator, known_duration=100.0)
    element.listeners[0].on_progress(97.0)

    coordinator.dispatch(SeekRelative(5.0))
    assert coordinator.state.current_time_seconds == 100.0

    coordinator.dispatch(SeekRelative(-500.0))
    assert coordinator.state.current_time_seconds == 0.0


def test_controls_hide_after_idle_while_playing(make_coordinator, scheduler):
    coordinator = _started(make_coordinator)

    coordinator.dispatch(TogglePlayPause())
    coordinator.on_pointer_move()
    scheduler.advance(2.9)
    assert coordinator.state.controls_visible is True

    scheduler.advance(0.2)
    assert coordinator.state.controls_visible is False


def test_pointer_move_rearms_hide_timer(make_coordinator, scheduler):
    coordinator = _started(make_coordinator)
    coordinator.dispatch(TogglePlayPause())

    scheduler.advance(2.0)
    coordinator.on_pointer_move()
    scheduler.advance(2.0)
    assert coordinator.state.controls_visible is True

    scheduler.advance(1.5)
    assert coordinator.state.controls_visible is False

    coordinator.on_pointer_move()
    assert coordinator.state.controls_visible is True


def test_pointer_leave_hides_immediately_and_cancels_timer(make_coordinator, scheduler):
    coordinator = _started(make_coordinator)
    coordinator.dispatch(TogglePlayPause())
    coordinator.on_pointer_move()

    scheduler.advance(1.0)
    coordinator.on_pointer_leave()

    assert coordinator.state.controls_visible is False
    assert scheduler.pending == {}


def test_controls_stay_visible_while_paused(make_coordinator, scheduler):
    coordinator = _started(make_coordinator)

    coordinator.on_pointer_move()
    coordinator.on_pointer_leave()
    scheduler.advance(10.0)
    assert coordinator.state.controls_visible is True

    coordinator.dispatch(TogglePlayPause())
    scheduler.advance(3.5)
    assert coordinator.state.controls_visible is False

    coordinator.dispatch(TogglePlayPause())
    assert coordinator.state.controls_visible is True
    assert scheduler.pending == {}


def test_buffering_shows_controls_and_resume_rearms(make_coordinator, element, scheduler):
    coordinator = _started(make_coordinator)
    coordinator.dispatch(TogglePlayPause())
    listener = element.listeners[0]

    listener.on_stalled()
    assert coordinator.state.playback is PlaybackStatus.BUFFERING
    assert coordinator.state.controls_visible is True
    scheduler.advance(10.0)
    assert coordinator.state.controls_visible is True

    listener.on_resumed()
    scheduler.advance(3.0)
    assert coordinator.state.controls_visible is False


def test_progress_events_do_not_rearm_the_timer(make_coordinator, element, scheduler):
    coordinator = _started(make_coordinator)
    coordinator.dispatch(TogglePlayPause())
    listener = element.listeners[0]

    for second in range(1, 4):
        scheduler.advance(1.0)
        listener.on_progress(float(second))

    assert coordinator.state.controls_visible is False


def test_fullscreen_flag_follows_platform_signal(make_coordinator, fullscreen):
    coordinator = _started(make_coordinator)

    coordinator.dispatch(ToggleFullscreen())
    assert fullscreen.requests == ["request"]
    assert coordinator.state.fullscreen is False

    fullscreen.emit(True)
    assert coordinator.state.fullscreen is True

    coordinator.dispatch(ToggleFullscreen())
    assert fullscreen.requests == ["request", "exit"]
    fullscreen.emit(False)
    assert coordinator.state.fullscreen is False


def test_hiding_controls_closes_speed_menu(make_coordinator, scheduler):
    coordinator = _started(make_coordinator)
    coordinator.dispatch(ToggleSpeedMenu())
    coordinator.dispatch(TogglePlayPause())
    assert coordinator.state.speed_menu_open is True

    scheduler.advance(3.0)

    assert coordinator.state.speed_menu_open is False
    assert coordinator.dispatch(SetPlaybackRate(1.5)) is True
    assert coordinator.state.playback_rate == 1.5


def test_observers_get_snapshots_and_failures_are_logged(make_coordinator, logger):
    coordinator = _started(make_coordinator)
    seen = []

    def broken(_state):
        raise ValueError("render failed")

    coordinator.add_observer(broken)
    remove = coordinator.add_observer(seen.append)
    coordinator.dispatch(TogglePlayPause())
    seen[-1].is_playing = False

    assert coordinator.state.is_playing is True
    assert logger.exceptions == ["Player state observer failed"]

    remove()
    coordinator.dispatch(TogglePlayPause())
    assert len(seen) == 1


def test_close_cancels_pending_hide(make_coordinator, scheduler):
    coordinator = _started(make_coordinator)
    coordinator.dispatch(TogglePlayPause())
    assert scheduler.pending

    coordinator.close()

    assert scheduler.pending == {}
