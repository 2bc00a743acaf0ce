import pytest

from tvsaude.display.media import (
    BackgroundAudio, HeadlessPlayer, LocalFilePlayer, PlayerState, YouTubePlayer
)


class Events:

    def __init__(self, player):
        self.started, self.ended, self.errors = [], [], []
        player.on_started = self.started.append
        player.on_ended = self.ended.append
        player.on_error = lambda item_id, error: self.errors.append(item_id)


def test_headless_player_requires_source_resolution(timers):
    with pytest.raises(TypeError):
        HeadlessPlayer(timers)


def test_local_file_ends_after_duration(timers):
    player = LocalFilePlayer(timers, 'http://tv.test/uploads/')
    events = Events(player)

    player.load({'id': 1, 'title': 'Vacinação', 'file': 'vacina da gripe.mp4', 'duration': 30})
    assert player.source == 'http://tv.test/uploads/vacina%20da%20gripe.mp4'

    player.play()
    assert events.started == [1]

    timers.advance(29)
    assert events.ended == []

    timers.advance(1)
    assert events.ended == [1]
    assert player.get_state() == PlayerState.ENDED


def test_pause_keeps_position(timers):
    player = LocalFilePlayer(timers, 'http://tv.test/uploads')
    events = Events(player)
    player.load({'id': 1, 'title': 'Vacinação', 'file': 'vacina.mp4', 'duration': 30})
    player.play()

    timers.advance(10)
    player.pause()
    timers.advance(100)
    assert events.ended == []

    player.play()
    timers.advance(20)
    assert events.ended == [1]


def test_local_file_without_file_is_error(timers):
    player = LocalFilePlayer(timers, 'http://tv.test/uploads')
    events = Events(player)

    player.load({'id': 3, 'title': 'Sem arquivo'})
    player.play()

    assert events.errors == [3]
    assert events.started == []
    assert player.get_state() == PlayerState.ERROR


def test_youtube_embed_url(timers):
    player = YouTubePlayer(timers)
    events = Events(player)

    player.load({'id': 2, 'title': 'Higiene', 'youtube_url': 'https://www.youtube.com/watch?v=dQw4w9WgXcQ'})
    assert player.source.startswith('https://www.youtube.com/embed/dQw4w9WgXcQ?autoplay=1')

    player.load({'id': 4, 'title': 'Quebrado', 'youtube_url': 'https://exemplo.com/video'})
    assert events.errors == [4]


def test_background_audio_volume_is_clamped():
    audio = BackgroundAudio(volume=0.95)

    assert audio.volume_up() == 1.0
    assert audio.volume_up() == 1.0
    assert audio.change_track('desconhecida') is False
    assert audio.toggle() is False
