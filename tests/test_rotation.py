import pytest

from tvsaude.display.rotation import PlaybackState, VideoRotation, next_index
from tests.fakes import RecordingPlayer


def video(id, kind='local'):
    return {'id': id, 'title': f'Vídeo {id}', 'kind': kind}


@pytest.fixture
def local():
    return RecordingPlayer('local')


@pytest.fixture
def youtube():
    return RecordingPlayer('youtube')


@pytest.fixture
def rotation(local, youtube, timers):
    return VideoRotation({'local': local, 'youtube': youtube}, timers)


@pytest.mark.parametrize('index, length, step, expected', [
    (0, 1, 1, 0),
    (2, 3, 1, 0),
    (1, 3, 1, 2),
    (0, 3, -1, 2),
    (0, 0, 1, 0),
])
def test_next_index_is_circular(index, length, step, expected):
    assert next_index(index, length, step) == expected


def test_first_list_starts_playing(rotation, local):
    rotation.set_items([video(1), video(2)])

    assert local.loaded_ids() == [1]
    assert rotation.state == PlaybackState.PLAYING


def test_natural_end_advances_after_short_delay(rotation, local, timers):
    rotation.set_items([video(1), video(2), video(3)])

    local.finish()
    assert local.loaded_ids() == [1]
    timers.advance(0.5)
    assert local.loaded_ids() == [1, 2]

    local.finish()
    timers.advance(0.5)
    local.finish()
    timers.advance(0.5)
    assert local.loaded_ids() == [1, 2, 3, 1]


def test_single_item_restarts_in_place(rotation, local, timers):
    rotation.set_items([video(1)])

    local.finish()
    timers.advance(0.5)

    assert local.loaded_ids() == [1]
    assert ('seek', 0) in local.calls
    assert rotation.index == 0


def test_errors_advance_and_reset_when_item_starts(rotation, local, timers):
    rotation.set_items([video(1), video(2)])

    local.fail()
    assert rotation.state == PlaybackState.ERROR
    assert rotation.error_count == 1

    timers.advance(2)
    assert local.loaded_ids() == [1, 2]
    assert rotation.error_count == 0
    assert rotation.state == PlaybackState.PLAYING


def test_max_errors_reloads_list(local, youtube, timers):
    refetches = []

    def refetch():
        refetches.append(True)
        return [video(1), video(2), video(3)]

    local.auto_start = False
    rotation = VideoRotation({'local': local, 'youtube': youtube}, timers, refetch=refetch)
    rotation.set_items([video(1), video(2), video(3)])

    local.fail()
    timers.advance(2)
    local.fail()
    timers.advance(2)
    assert refetches == []

    local.fail()
    assert refetches == []
    assert len(timers.pending('recarregar')) == 1

    timers.advance(0)

    assert refetches == [True]
    assert rotation.error_count == 0
    assert local.loaded_ids() == [1, 2, 3, 3]


def test_reload_without_server_keeps_current_list(local, youtube, timers):
    rotation = VideoRotation({'local': local, 'youtube': youtube}, timers, refetch=lambda: None)
    rotation.set_items([video(1), video(2)])

    rotation.reload()
    timers.advance(0)

    assert rotation.items == [video(1), video(2)]
    assert local.loaded_ids() == [1, 1]


def test_reload_result_discarded_after_manual_next(local, youtube, timers):
    rotation = VideoRotation({'local': local, 'youtube': youtube}, timers, refetch=lambda: [video(7)])
    rotation.set_items([video(1), video(2)])

    rotation.reload()
    rotation.next()
    timers.advance(0)

    assert rotation.items == [video(1), video(2)]
    assert local.loaded_ids() == [1, 2]


def test_safety_timer_forces_transition(rotation, local, timers):
    rotation.set_items([video(1), video(2)])

    timers.advance(299)
    assert local.loaded_ids() == [1]

    timers.advance(1)
    assert local.loaded_ids() == [1, 2]
    assert len(timers.pending('seguranca')) == 1


def test_manual_next_cancels_pending_transition(rotation, local, timers):
    rotation.set_items([video(1), video(2), video(3)])
    local.finish()

    rotation.next()
    timers.advance(1)

    assert local.loaded_ids() == [1, 2]
    assert timers.pending('fim') == []


def test_previous_wraps_to_last(rotation, local):
    rotation.set_items([video(1), video(2), video(3)])
    rotation.previous()
    assert local.loaded_ids() == [1, 3]


def test_stale_end_event_is_ignored(rotation, local, timers):
    rotation.set_items([video(1), video(2)])
    rotation.next()

    rotation.on_ended(1)
    rotation.on_error(1, 'antigo')

    assert timers.pending('fim') == []
    assert rotation.error_count == 0


def test_new_list_never_interrupts_current_item(rotation, local):
    rotation.set_items([video(1), video(2)])
    rotation.next()

    rotation.set_items([video(1), video(2), video(4)])

    assert local.loaded_ids() == [1, 2]
    assert rotation.current == video(2)


def test_shrunken_list_resets_cursor(rotation, local):
    rotation.set_items([video(1), video(2), video(3)])
    rotation.next()
    rotation.next()

    rotation.set_items([video(5)])

    assert rotation.index == 0
    assert local.loaded_ids()[-1] == 5


def test_empty_list_halts_playback(rotation, local, timers):
    rotation.set_items([video(1), video(2)])

    rotation.set_items([])

    assert rotation.state == PlaybackState.NO_CONTENT
    assert local.calls[-1] == ('stop', 1)
    assert timers.pending() == []


def test_switching_backend_stops_previous_player(rotation, local, youtube):
    rotation.set_items([video(1), video(2, kind='youtube')])
    rotation.next()

    assert ('stop', 1) in local.calls
    assert youtube.loaded_ids() == [2]


def test_unsupported_kind_counts_as_error(rotation, local, timers):
    rotation.set_items([video(1, kind='vimeo'), video(2)])
    assert rotation.error_count == 1

    timers.advance(2)
    assert local.loaded_ids() == [2]


def test_unsupported_kind_stops_previous_player(rotation, local, timers):
    rotation.set_items([video(1), video(2, kind='vimeo')])

    rotation.next()

    assert local.calls[-1] == ('stop', 1)
    assert rotation.error_count == 1

    timers.advance(2)
    assert local.loaded_ids() == [1, 1]


def test_pause_cancels_pending_and_play_resumes(rotation, local, timers):
    rotation.set_items([video(1), video(2)])

    rotation.pause()
    assert rotation.state == PlaybackState.PAUSED
    assert timers.pending() == []

    rotation.play()
    assert local.calls[-1] == ('play', 1)
    assert len(timers.pending('seguranca')) == 1


def test_volume_is_clamped_and_applied_to_players(rotation, local, youtube):
    assert rotation.volume_up() == 1.0
    assert rotation.volume_down() == 0.9
    assert local.volume == youtube.volume == 0.9

    assert rotation.toggle_mute() is True
    assert local.muted and youtube.muted
