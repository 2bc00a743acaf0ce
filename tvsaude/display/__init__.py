"""
Cliente da TV
Reprodução de vídeos, carrosséis e controle remoto
"""

from tvsaude.display.app import DisplayApp, Screen
from tvsaude.display.api_client import TVApiClient
from tvsaude.display.rotation import VideoRotation, PlaybackState, next_index

__all__ = ['DisplayApp', 'Screen', 'TVApiClient', 'VideoRotation', 'PlaybackState', 'next_index']
