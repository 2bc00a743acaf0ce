#!/usr/bin/env python3
"""
Dados iniciais do backend TV Saúde.

Cria:
  1. Tabelas do banco (se não existirem)
  2. Localidade UBS Centro com o IP da TV da recepção
  3. Vídeos de exemplo e a playlist ativa global
  4. Imagens do slideshow e mensagens do letreiro
  5. Avisos de exemplo

Usage:
    python seed.py
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from dotenv import load_dotenv
load_dotenv()

from datetime import datetime, time, timedelta
from tvsaude import create_app, db


# ── Configuração ─────────────────────────────────────────────
LOCALITY_NAME = 'UBS Centro'
LOCALITY_IP   = '10.0.50.10'
LOCALITY_RANGE = '10.0.50.0/24'

VIDEOS = [
    {'title': 'Vacinação', 'description': 'Calendário de vacinação da família',
     'category': 'Prevenção', 'kind': 'local', 'file': 'vacinacao.mp4', 'duration': 180},
    {'title': 'Higiene das Mãos', 'description': 'Como lavar as mãos corretamente',
     'category': 'Prevenção', 'kind': 'local', 'file': 'higiene-maos.mp4', 'duration': 120},
    {'title': 'Alimentação Saudável', 'description': 'Dicas de nutrição',
     'category': 'Bem-estar', 'kind': 'youtube',
     'youtube_url': 'https://www.youtube.com/watch?v=dQw4w9WgXcQ', 'duration': 240},
]

IMAGES = [
    {'title': 'Campanha da Gripe', 'file': 'campanha-gripe.jpg', 'duration_ms': 8000},
    {'title': 'Horários da UBS', 'file': 'horarios.jpg', 'duration_ms': 5000},
]

MESSAGES = [
    'Bem-vindo à Unidade Básica de Saúde',
    'Mantenha seu cartão de vacinação atualizado',
    'Em caso de emergência, procure a recepção',
]
# ─────────────────────────────────────────────────────────────


def seed():
    env = os.environ.get('FLASK_ENV', 'development')
    app = create_app(env)

    with app.app_context():
        from tvsaude.models import (
            Announcement, Image, Locality, LocalityIP, LocalityVideo, Message, Playlist, Video
        )

        # 1. Tabelas
        db.create_all()
        print('✓ Tabelas criadas / verificadas')

        if Locality.query.filter_by(name=LOCALITY_NAME).first():
            print('→ Dados de exemplo já existem, nada a fazer')
            return

        # 2. Vídeos e playlist ativa
        videos = []
        for order, data in enumerate(VIDEOS):
            video = Video(display_order=order, **data)
            db.session.add(video)
            videos.append(video)

        playlist = Playlist(name='Playlist Geral', description='Vídeos exibidos em todas as UBS')
        for video in videos:
            playlist.add_video(video)
        db.session.add(playlist)
        db.session.flush()
        playlist.activate()
        print(f'✓ {len(videos)} vídeos e playlist ativa "{playlist.name}"')

        # 3. Localidade UBS Centro, com o vídeo de vacinação anexado
        locality = Locality(name=LOCALITY_NAME, description='Unidade central')
        locality.ips.append(LocalityIP(ip_address=LOCALITY_IP, description='TV da recepção'))
        locality.ips.append(LocalityIP(ip_range=LOCALITY_RANGE, description='Rede da unidade', is_active=False))
        locality.video_links.append(LocalityVideo(video=videos[0], priority=1))
        db.session.add(locality)
        db.session.flush()
        print(f'✓ Localidade {locality.name} (IP {LOCALITY_IP})')

        # 4. Imagens e mensagens
        for order, data in enumerate(IMAGES):
            db.session.add(Image(display_order=order, **data))
        for order, text in enumerate(MESSAGES):
            db.session.add(Message(text=text, display_order=order))
        print(f'✓ {len(IMAGES)} imagens e {len(MESSAGES)} mensagens')

        # 5. Avisos
        now = datetime.now()
        announcements = [
            Announcement(
                title='Próximas Consultas',
                message='Dr. João - Clínico Geral às 14:30\nDra. Maria - Pediatra às 15:00',
                type='consulta',
                locality_id=locality.id,
                start_time=time(14, 0),
                end_time=time(16, 0)
            ),
            Announcement(
                title='Medicação Disponível',
                message='Dipirona, Paracetamol e Ibuprofeno disponíveis na farmácia',
                type='medicacao',
                priority=2
            ),
            Announcement(
                title='Campanha de Vacinação',
                message='Vacina contra Gripe até sexta-feira. Tragam cartão de vacinação!',
                type='campanha',
                end_date=now + timedelta(days=7),
                priority=4
            ),
            Announcement(
                title='Horário de Funcionamento',
                message='Segunda a Sexta: 7h às 17h\nSábado: 7h às 12h',
                type='horario',
                priority=1
            ),
        ]
        db.session.add_all(announcements)
        db.session.commit()
        print(f'✓ {len(announcements)} avisos de exemplo')

    print('\nSeed concluído.')


if __name__ == '__main__':
    seed()
