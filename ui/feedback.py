"""Notices, status line and sounds for the Streamlit page."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import streamlit as st

from puzzles.interfaces import StatusView

logger = logging.getLogger(__name__)

SOUND_FILES = {
    "move": "move.mp3",
    "capture": "capture.mp3",
    "correct": "correct.mp3",
    "wrong": "wrong.mp3",
    "alldone": "alldone.mp3",
}


class StreamlitNotifier:
    """Collects notices between reruns; the page flushes them as toasts."""

    def __init__(self) -> None:
        self.status: Optional[StatusView] = None
        self._messages: List[str] = []

    def notify(self, message: str) -> None:
        self._messages.append(message)

    def set_status(self, status: Optional[StatusView]) -> None:
        self.status = status

    def drain(self) -> List[str]:
        messages, self._messages = self._messages, []
        return messages

    def render(self) -> None:
        for message in self.drain():
            st.toast(message)
        if self.status is None:
            return
        st.markdown(f"**{self.status.text}**")
        if self.status.fen:
            st.caption(f"FEN: `{self.status.fen}`")
        if self.status.pgn:
            st.caption(f"PGN: {self.status.pgn}")


class StreamlitSounds:
    """Queues sounds and plays them once with autoplaying st.audio."""

    def __init__(self, sounds_dir: Path):
        self.sounds_dir = Path(sounds_dir)
        self._queue: List[str] = []

    def play(self, name: str) -> None:
        self._queue.append(name)

    def render(self) -> None:
        queue, self._queue = self._queue, []
        if not queue:
            return
        # Only the last sound of a rerun is audible anyway
        path = self.sounds_dir / SOUND_FILES.get(queue[-1], "")
        if not path.is_file():
            logger.debug("No sound file for %s", queue[-1])
            return
        st.audio(str(path), autoplay=True)
