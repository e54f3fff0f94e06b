from player.now_playing import (
    ELAPSED, RATE, TITLE, CommandStatus, NowPlayingCenter, RemoteCommand,
)


def test_set_update_clear(now_playing):
    changes = []
    now_playing.infoChanged.connect(changes.append)

    now_playing.set_info({TITLE: "A", RATE: 1.0})
    assert now_playing.update(**{ELAPSED: 3.0})
    assert now_playing.info() == {TITLE: "A", RATE: 1.0, ELAPSED: 3.0}

    now_playing.clear()
    assert now_playing.is_empty()
    assert changes[-1] == {}
    assert len(changes) == 3


def test_update_never_resurrects_cleared_surface(now_playing):
    changes = []
    now_playing.infoChanged.connect(changes.append)

    assert now_playing.update(**{ELAPSED: 1.0}) is False
    assert now_playing.info() == {}
    assert changes == []


def test_clear_on_empty_surface_is_silent(now_playing):
    changes = []
    now_playing.infoChanged.connect(changes.append)
    now_playing.clear()
    assert changes == []


def test_info_returns_a_copy(now_playing):
    now_playing.set_info({TITLE: "A"})
    now_playing.info()[TITLE] = "mutated"
    assert now_playing.info()[TITLE] == "A"


def test_dispatch_without_handler():
    center = NowPlayingCenter()
    assert center.dispatch(RemoteCommand.PLAY) == CommandStatus.NO_HANDLER


def test_dispatch_passes_arguments_and_status():
    center = NowPlayingCenter()
    got = []

    def handler(position=None):
        got.append(position)
        return CommandStatus.SUCCESS

    center.add_target(RemoteCommand.CHANGE_PLAYBACK_POSITION, handler)
    assert center.dispatch(RemoteCommand.CHANGE_PLAYBACK_POSITION, position=12.5) == CommandStatus.SUCCESS
    assert got == [12.5]


def test_handler_exception_becomes_command_failed():
    center = NowPlayingCenter()

    def boom():
        raise RuntimeError("nope")

    center.add_target(RemoteCommand.PAUSE, boom)
    assert center.dispatch(RemoteCommand.PAUSE) == CommandStatus.COMMAND_FAILED


def test_remove_targets():
    center = NowPlayingCenter()
    center.add_target(RemoteCommand.PLAY, lambda: CommandStatus.SUCCESS)
    center.add_target(RemoteCommand.PAUSE, lambda: CommandStatus.SUCCESS)

    center.remove_target(RemoteCommand.PLAY)
    assert not center.has_target(RemoteCommand.PLAY)
    assert center.has_target(RemoteCommand.PAUSE)

    center.remove_all_targets()
    assert center.dispatch(RemoteCommand.PAUSE) == CommandStatus.NO_HANDLER
