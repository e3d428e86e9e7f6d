# services/playback.py
"""
Playback Controller
===================
Plays one fetched MP3 buffer through an external command-line player and
reports completion.
"""

import logging
import os
import shlex
import shutil
import subprocess
import tempfile
import threading
from typing import Callable, List, Optional

from errors import PlaybackError

logger = logging.getLogger(__name__)

# 按顺序尝试的播放器
DEFAULT_PLAYERS = (
    ("ffplay", "-nodisp", "-autoexit", "-loglevel", "quiet"),
    ("mpg123", "-q"),
    ("afplay",),
)


class PlaybackController:
    """
    Single play-to-completion flow.

    The audio buffer is written to a temporary .mp3 file, which is deleted
    when the next buffer replaces it or on close().
    """

    def __init__(
        self,
        player_command: Optional[str] = None,
        on_finished: Optional[Callable[[], None]] = None,
        popen=subprocess.Popen,
    ):
        self.player_command = player_command
        self.on_finished = on_finished
        self._popen = popen

        self._lock = threading.Lock()
        self._playing = False
        self._process = None
        self._watcher: Optional[threading.Thread] = None
        self._audio_path: Optional[str] = None

    @property
    def is_playing(self) -> bool:
        with self._lock:
            return self._playing

    @property
    def audio_path(self) -> Optional[str]:
        return self._audio_path

    def resolve_command(self) -> List[str]:
        if self.player_command:
            return shlex.split(self.player_command)
        for candidate in DEFAULT_PLAYERS:
            if shutil.which(candidate[0]):
                return list(candidate)
        raise PlaybackError("No audio player found (install ffmpeg or mpg123, or set TTS_PLAYER_COMMAND)")

    def play(self, audio: Optional[bytes]) -> bool:
        """
        Start playing `audio`.

        Returns:
            True if playback started, False if nothing to play, already
            playing, or the player could not be started
        """
        if not audio:
            return False

        with self._lock:
            if self._playing:
                return False
            self._playing = True

        try:
            path = self._replace_resource(audio)
            process = self._popen(
                self.resolve_command() + [path],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except (OSError, PlaybackError) as e:
            logger.error(f"[Playback] Failed to start player: {e}")
            self._finish()
            return False

        self._process = process
        self._watcher = threading.Thread(target=self._wait_for_exit, args=(process,), daemon=True)
        self._watcher.start()
        logger.info(f"[Playback] Started ({len(audio)} bytes)")
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the current playback ends. Returns False on timeout."""
        watcher = self._watcher
        if watcher is None:
            return True
        watcher.join(timeout)
        return not watcher.is_alive()

    def close(self) -> None:
        """Stop a running player and delete the temporary audio file."""
        process = self._process
        if process is not None and process.poll() is None:
            process.terminate()
        self.wait(timeout=5.0)
        self._release_resource()

    def _wait_for_exit(self, process) -> None:
        try:
            code = process.wait()
            if code:
                logger.warning(f"[Playback] Player exited with code {code}")
        except OSError as e:
            logger.error(f"[Playback] Playback error: {e}")
        finally:
            self._finish()

    def _finish(self) -> None:
        with self._lock:
            self._playing = False
            self._process = None
        if self.on_finished:
            self.on_finished()

    def _replace_resource(self, audio: bytes) -> str:
        self._release_resource()
        with tempfile.NamedTemporaryFile(prefix="tts-", suffix=".mp3", delete=False) as f:
            f.write(audio)
            self._audio_path = f.name
        return self._audio_path

    def _release_resource(self) -> None:
        path, self._audio_path = self._audio_path, None
        if path:
            try:
                os.remove(path)
            except FileNotFoundError:
                pass
