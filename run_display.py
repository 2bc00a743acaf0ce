#!/usr/bin/env python3
"""
Cliente da TV (sem tela): reproduz o ciclo de vídeos, avisos e comandos.

Usage:
    TV_API_BASE_URL=http://10.0.50.1:5000/api python run_display.py
"""

import signal
import threading

from dotenv import load_dotenv
load_dotenv()

from config import DisplayConfig
from tvsaude.display import DisplayApp


def main():
    app = DisplayApp(DisplayConfig)
    stopped = threading.Event()

    def shutdown(signum, frame):
        stopped.set()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    app.start()
    try:
        while not stopped.wait(60):
            info = app.screen_info()
            video = info.get('video') or {}
            print(f"📺 {info['screen']} {video.get('title', '')}".rstrip())
    finally:
        app.stop()
        app.timers.stop()


if __name__ == '__main__':
    main()
