import threading

import pytest

from player.backend import SourceOpenError, check_source
from player.now_playing import (
    ARTIST, DURATION, ELAPSED, RATE, TITLE, CommandStatus, RemoteCommand,
)
from player.player import PlaybackError, Player, PlayerStatus


def _events(player):
    events = []
    player.statusChanged.connect(lambda s: events.append(("status", s)))
    player.trackChanged.connect(lambda t: events.append(("track", t.path if t else None)))
    return events


def test_initial_state_is_idle(player, now_playing):
    assert player.status == PlayerStatus.STOPPED
    assert player.track is None
    assert not player.has_session
    assert now_playing.is_empty()


def test_play_publishes_and_fills_surface(player, now_playing, backend_factory):
    events = _events(player)

    meta = player.play("/a.mp3", title="A", artist="X")

    backend = backend_factory.created[-1]
    assert backend.calls == ["play"]
    assert player.status == PlayerStatus.PLAYING
    assert player.track == meta
    assert ("status", PlayerStatus.PLAYING) in events
    assert ("track", "/a.mp3") in events

    info = now_playing.info()
    assert info[TITLE] == "A"
    assert info[ARTIST] == "X"
    assert info[RATE] == 1.0
    assert info[DURATION] == pytest.approx(180.0)
    assert info[ELAPSED] == 0.0
    assert player.session.sync_timer.isActive()
    assert player.session.sync_timer.interval() == 1000


def test_second_play_replaces_first_session(player, backend_factory, now_playing):
    player.play("/a.mp3", title="A")
    first_session = player.session
    player.play("/b.mp3", title="B")

    first, second = backend_factory.created
    assert first.released and "stop" in first.calls
    assert not second.released
    assert first_session.ended
    assert not first_session.sync_timer.isActive()
    assert player.track.path == "/b.mp3"
    assert now_playing.info()[TITLE] == "B"
    assert sum(1 for b in backend_factory.created if b.playing) == 1


def test_failed_play_raises_and_leaves_no_session(player, now_playing, backend_factory):
    player.play("/a.mp3", title="A")
    failures = []
    player.playbackFailed.connect(failures.append)
    events = _events(player)

    with pytest.raises(PlaybackError):
        player.play("/broken.mp3")

    assert not player.has_session
    assert player.track is None
    assert player.status == PlayerStatus.STOPPED
    assert now_playing.is_empty()
    assert backend_factory.created[0].released
    assert failures and "broken" in failures[0]
    assert ("status", PlayerStatus.STOPPED) in events
    assert ("track", None) in events


def test_pause_and_resume_update_rate(player, now_playing, backend_factory):
    player.play("/a.mp3")
    backend = backend_factory.created[-1]
    backend.set_position(42_000)

    player.pause()
    assert player.status == PlayerStatus.PAUSED
    assert now_playing.info()[RATE] == 0.0
    assert now_playing.info()[ELAPSED] == pytest.approx(42.0)
    assert player.session.sync_timer.isActive()

    player.resume()
    assert player.status == PlayerStatus.PLAYING
    assert now_playing.info()[RATE] == 1.0
    assert backend.calls[-2:] == ["pause", "play"]


def test_transport_while_idle_is_noop(player, now_playing):
    events = _events(player)
    changes = []
    now_playing.infoChanged.connect(changes.append)

    player.pause()
    player.resume()
    player.toggle_play_pause()
    assert player.seek(10) is False
    player.stop()

    assert player.status == PlayerStatus.STOPPED
    assert events == []
    assert changes == []


def test_stop_clears_everything(player, now_playing, backend_factory):
    events = _events(player)
    player.play("/a.mp3")
    session = player.session

    player.stop()

    assert player.status == PlayerStatus.STOPPED
    assert player.track is None
    assert not player.has_session
    assert now_playing.is_empty()
    assert backend_factory.created[-1].released
    assert session.ended and not session.sync_timer.isActive()
    assert events[-1] == ("track", None)


def test_stale_tick_does_not_touch_surface(player, now_playing):
    player.play("/a.mp3")
    session = player.session
    player.stop()

    changes = []
    now_playing.infoChanged.connect(changes.append)
    session._on_timeout()
    player._sync_tick(session)

    assert changes == []
    assert now_playing.is_empty()


def test_tick_resyncs_elapsed(player, now_playing, backend_factory):
    player.play("/a.mp3")
    backend_factory.created[-1].set_position(5_000)

    player.session._on_timeout()

    assert now_playing.info()[ELAPSED] == pytest.approx(5.0)
    assert now_playing.info()[RATE] == 1.0


def test_natural_completion_matches_stop_and_stop_after_is_idempotent(player, now_playing, backend_factory):
    player.play("/a.mp3")
    session = player.session
    backend = backend_factory.created[-1]

    backend.finished.emit()

    assert player.status == PlayerStatus.STOPPED
    assert not player.has_session
    assert now_playing.is_empty()
    assert backend.released
    assert not session.sync_timer.isActive()

    events = _events(player)
    player.stop()
    assert events == []
    assert player.status == PlayerStatus.STOPPED


def test_backend_error_ends_session(player, now_playing, backend_factory):
    failures = []
    player.playbackFailed.connect(failures.append)
    player.play("/a.mp3")

    backend_factory.created[-1].failed.emit("decoder exploded")

    assert failures == ["decoder exploded"]
    assert not player.has_session
    assert now_playing.is_empty()


def test_events_from_superseded_backend_are_ignored(player, backend_factory, now_playing):
    player.play("/a.mp3")
    player.play("/b.mp3")
    old = backend_factory.created[0]

    old.finished.emit()

    assert player.status == PlayerStatus.PLAYING
    assert player.track.path == "/b.mp3"
    assert not now_playing.is_empty()


def test_seek_clamps_and_keeps_status(player, now_playing, backend_factory):
    player.play("/a.mp3")
    player.pause()
    backend = backend_factory.created[-1]

    assert player.seek(30)
    assert backend.position_ms() == 30_000
    assert player.status == PlayerStatus.PAUSED
    assert now_playing.info()[ELAPSED] == pytest.approx(30.0)

    player.seek_ms(999_999_999)
    assert backend.position_ms() == 180_000
    player.seek_ms(-10)
    assert backend.position_ms() == 0


def test_duration_change_updates_surface(player, now_playing, backend_factory):
    durations = []
    player.durationChanged.connect(durations.append)
    player.play("/a.mp3")

    backend_factory.created[-1].durationChanged.emit(200_000)

    assert durations == [200_000]
    assert now_playing.info()[DURATION] == pytest.approx(200.0)


def test_volume_is_clamped_and_carried_to_new_sessions(player, backend_factory):
    player.set_volume(1.7)
    assert player.volume() == 1.0
    player.set_volume(0.25)
    player.play("/a.mp3")
    assert backend_factory.created[-1].volume == 0.25

    player.set_volume(0.5)
    assert backend_factory.created[-1].volume == 0.5


def test_remote_commands_drive_the_same_state_machine(player, now_playing):
    player.play("/a.mp3")

    assert now_playing.dispatch(RemoteCommand.PAUSE) == CommandStatus.SUCCESS
    assert player.status == PlayerStatus.PAUSED
    assert now_playing.info()[RATE] == 0.0

    assert now_playing.dispatch(RemoteCommand.PLAY) == CommandStatus.SUCCESS
    assert player.status == PlayerStatus.PLAYING

    assert now_playing.dispatch(RemoteCommand.TOGGLE_PLAY_PAUSE) == CommandStatus.SUCCESS
    assert player.status == PlayerStatus.PAUSED

    assert now_playing.dispatch(RemoteCommand.CHANGE_PLAYBACK_POSITION, position=12.0) == CommandStatus.SUCCESS
    assert player.position_ms() == 12_000
    assert now_playing.dispatch(RemoteCommand.CHANGE_PLAYBACK_POSITION) == CommandStatus.COMMAND_FAILED


def test_remote_commands_from_worker_threads_keep_surface_consistent(player, now_playing, backend_factory):
    player.play("/a.mp3")
    commands = [RemoteCommand.PAUSE, RemoteCommand.TOGGLE_PLAY_PAUSE, RemoteCommand.PLAY]
    results = []
    start = threading.Barrier(6)

    def worker(n):
        start.wait()
        for i in range(50):
            results.append(now_playing.dispatch(commands[(n + i) % len(commands)]))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert not any(t.is_alive() for t in threads)
    assert len(results) == 300
    assert set(results) == {CommandStatus.SUCCESS}
    assert player.status in (PlayerStatus.PLAYING, PlayerStatus.PAUSED)
    assert player.has_session
    expected_rate = 1.0 if player.status == PlayerStatus.PLAYING else 0.0
    assert now_playing.info()[RATE] == expected_rate
    assert backend_factory.created[-1].playing == (player.status == PlayerStatus.PLAYING)


def test_remote_seek_while_idle_fails(player, now_playing):
    assert now_playing.dispatch(RemoteCommand.CHANGE_PLAYBACK_POSITION, position=1.0) == CommandStatus.COMMAND_FAILED


def test_shutdown_stops_and_unregisters(qapp, now_playing, backend_factory):
    p = Player(now_playing, backend_factory=backend_factory)
    p.play("/a.mp3")

    p.shutdown()

    assert not p.has_session
    assert now_playing.is_empty()
    assert now_playing.dispatch(RemoteCommand.PLAY) == CommandStatus.NO_HANDLER


def test_check_source_rejects_missing_and_non_audio(tmp_path):
    with pytest.raises(SourceOpenError):
        check_source(str(tmp_path / "missing.wav"))

    junk = tmp_path / "junk.bin"
    junk.write_bytes(b"\x00" * 16)
    with pytest.raises(SourceOpenError):
        check_source(str(junk))


def test_check_source_accepts_wav(tmp_path, make_wav):
    check_source(make_wav(tmp_path / "ok.wav"))
