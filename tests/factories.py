"""Criação rápida de registros para os testes"""

from tvsaude import db
from tvsaude.models import (
    Announcement, Image, Locality, LocalityImage, LocalityIP, LocalityPlaylist, LocalityVideo,
    Playlist, Video
)


def make_video(title='Vídeo', order=0, active=True, **kwargs):
    kwargs.setdefault('file', f"{title.lower().replace(' ', '-')}.mp4")
    video = Video(title=title, display_order=order, is_active=active, **kwargs)
    db.session.add(video)
    db.session.flush()
    return video


def make_playlist(name='Playlist', videos=(), active=False):
    playlist = Playlist(name=name)
    for video in videos:
        playlist.add_video(video)
    db.session.add(playlist)
    db.session.flush()
    if active:
        playlist.activate()
    db.session.commit()
    return playlist


def make_locality(name='UBS Centro', ips=(), ranges=(), videos=(), playlists=(), images=(), active=True):
    """videos/playlists/images: objetos ou pares (objeto, prioridade)"""
    locality = Locality(name=name, is_active=active)
    for ip in ips:
        locality.ips.append(LocalityIP(ip_address=ip))
    for ip_range in ranges:
        locality.ips.append(LocalityIP(ip_range=ip_range))
    for entry in videos:
        video, priority = entry if isinstance(entry, tuple) else (entry, 1)
        locality.video_links.append(LocalityVideo(video=video, priority=priority))
    for entry in playlists:
        playlist, priority = entry if isinstance(entry, tuple) else (entry, 1)
        locality.playlist_links.append(LocalityPlaylist(playlist=playlist, priority=priority))
    for entry in images:
        image, priority = entry if isinstance(entry, tuple) else (entry, 1)
        locality.image_links.append(LocalityImage(image=image, priority=priority))
    db.session.add(locality)
    db.session.commit()
    return locality


def make_image(title='Imagem', order=0, active=True, duration_ms=5000):
    image = Image(title=title, file=f"{title.lower()}.jpg", display_order=order,
                  is_active=active, duration_ms=duration_ms)
    db.session.add(image)
    db.session.commit()
    return image


def make_announcement(title='Aviso', message='Mensagem', **kwargs):
    weekdays = kwargs.pop('weekdays', None)
    kwargs.setdefault('type', 'informativo')
    kwargs.setdefault('is_active', True)
    kwargs.setdefault('priority', 1)
    announcement = Announcement(title=title, message=message, **kwargs)
    if weekdays is not None:
        announcement.weekdays = weekdays
    db.session.add(announcement)
    db.session.commit()
    return announcement
