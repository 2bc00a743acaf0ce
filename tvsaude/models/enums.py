"""
Enums - Tipos enumerados dos modelos
====================================

Centraliza os tipos enumerados para evitar "magic strings"
e garantir a consistência dos dados.
"""

import enum


class AnnouncementType(enum.Enum):
    """Tipos de aviso exibidos na TV"""
    CONSULTA = 'consulta'
    MEDICACAO = 'medicacao'
    CAMPANHA = 'campanha'
    URGENCIA = 'urgencia'
    INFORMATIVO = 'informativo'
    HORARIO = 'horario'
    EVENTO = 'evento'

    @classmethod
    def get_display(cls, tipo: str) -> dict:
        """
        Retorna os metadados de exibição de um tipo

        duration_ms é o tempo de exibição do aviso no carrossel da TV;
        weight é o peso do tipo (quanto maior, mais importante).
        """
        display = {
            'consulta':    {'icon': '👨‍⚕️', 'color': '#3498db', 'weight': 3, 'duration_ms': 30000},
            'medicacao':   {'icon': '💊', 'color': '#27ae60', 'weight': 2, 'duration_ms': 25000},
            'campanha':    {'icon': '📢', 'color': '#e74c3c', 'weight': 1, 'duration_ms': 35000},
            'urgencia':    {'icon': '🚨', 'color': '#f39c12', 'weight': 5, 'duration_ms': 60000},
            'informativo': {'icon': 'ℹ️', 'color': '#9b59b6', 'weight': 1, 'duration_ms': 20000},
            'horario':     {'icon': '🕐', 'color': '#34495e', 'weight': 2, 'duration_ms': 15000},
            'evento':      {'icon': '🎪', 'color': '#16a085', 'weight': 2, 'duration_ms': 30000},
        }
        return display.get(tipo, display['informativo'])

    @classmethod
    def get_label(cls, tipo: str) -> str:
        labels = {
            'consulta': 'Consultas',
            'medicacao': 'Medicação',
            'campanha': 'Campanha',
            'urgencia': 'Urgência',
            'informativo': 'Informativo',
            'horario': 'Horário',
            'evento': 'Evento',
        }
        return labels.get(tipo, tipo)

    @classmethod
    def is_valid(cls, tipo: str) -> bool:
        return tipo in [t.value for t in cls]


class VideoKind(enum.Enum):
    """Origem do vídeo"""
    LOCAL = 'local'      # Arquivo em UPLOAD_FOLDER
    YOUTUBE = 'youtube'  # Embed do YouTube

    @classmethod
    def is_valid(cls, kind: str) -> bool:
        return kind in [k.value for k in cls]


class CommandName(enum.Enum):
    """Comandos aceitos pelo controle remoto"""
    PLAY = 'play'
    PAUSE = 'pause'
    NEXT = 'next'
    PREVIOUS = 'previous'
    RESTART = 'restart'
    RELOAD_PLAYLIST = 'reload_playlist'
    EMERGENCY_STOP = 'emergency_stop'
    VOLUME_UP = 'volume_up'
    VOLUME_DOWN = 'volume_down'
    MUTE = 'mute'

    # Áudio de fundo
    TOGGLE_BACKGROUND_MUSIC = 'toggle_background_music'
    BACKGROUND_MUSIC_ON = 'background_music_on'
    BACKGROUND_MUSIC_OFF = 'background_music_off'
    CHANGE_BACKGROUND_TRACK = 'change_background_track'
    BACKGROUND_VOLUME_UP = 'background_volume_up'
    BACKGROUND_VOLUME_DOWN = 'background_volume_down'

    @classmethod
    def is_valid(cls, name: str) -> bool:
        return name in [c.value for c in cls]
