# services/debounced_client.py
"""
Debounced Synthesis Client
==========================
Client-side controller that watches (text, language, voice), waits for the
input to settle, then fetches audio from the proxy.

Features:
- One explicit state (idle / counting down / fetching / ready / error)
- Restartable quiescence timer; a fired timer is a no-op if input moved on
- At most one fetch in flight; stale results are discarded
- Display-only countdown in 0.1s steps
"""

import logging
import math
import threading
import time
from enum import Enum
from typing import Callable, Optional

from errors import ClientFetchError
from services.synthesis_gateway import SynthesisRequest, SynthesisResult
from voice_catalog import MANDARIN, VoiceCatalog, normalize_language

logger = logging.getLogger(__name__)


class ClientState(Enum):
    """Client controller states"""
    IDLE = "idle"
    COUNTING_DOWN = "counting_down"
    FETCHING = "fetching"
    READY = "ready"
    ERROR = "error"


class DebouncedSynthesisClient:
    """
    Debounces input changes and fetches audio once the input is quiet.

    Usage:
        client = DebouncedSynthesisClient(
            catalog,
            fetch=SpeechProxyClient("http://127.0.0.1:5000").fetch,
            on_state_change=lambda c: print(c.state),
        )
        client.set_text("你好")
        client.set_language("zh-CN")
        # ~3s later: client.state == ClientState.READY, client.audio holds MP3 bytes
    """

    QUIESCENCE_SECONDS = 3.0
    COUNTDOWN_STEP = 0.1

    def __init__(
        self,
        catalog: VoiceCatalog,
        fetch: Callable[[SynthesisRequest], SynthesisResult],
        language: str = "ja-JP",
        text: str = "",
        quiescence: Optional[float] = None,
        on_state_change: Optional[Callable[["DebouncedSynthesisClient"], None]] = None,
        timer_factory=threading.Timer,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the controller.

        Args:
            catalog: Voice catalog used for voice defaults
            fetch: Callable performing one synthesis request (may raise ClientFetchError)
            language: Initial language code or alias
            text: Initial text
            quiescence: Seconds of quiet input before fetching
            on_state_change: Callback invoked after every state/data change
            timer_factory: threading.Timer-compatible factory (interval, function)
            clock: Monotonic clock used for the countdown display
        """
        self.catalog = catalog
        self._fetch = fetch
        self.quiescence = self.QUIESCENCE_SECONDS if quiescence is None else quiescence
        self.on_state_change = on_state_change
        self._timer_factory = timer_factory
        self._clock = clock

        self._lock = threading.RLock()

        # Watched input
        self.language = normalize_language(language)
        self.voice = catalog.default_voice(self.language) or ""
        self.text = text

        # Output
        self.state = ClientState.IDLE
        self.audio: Optional[bytes] = None
        self.phonetic = ""
        self.last_error: Optional[str] = None

        # Debounce bookkeeping
        self._timer = None
        self._deadline: Optional[float] = None
        self._generation = 0
        self._fetching = False
        self._fetch_deferred = False
        self._closed = False

        # Stats
        self.total_fetches = 0

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Arm the countdown for the initial input."""
        with self._lock:
            self._rearm()
        self._notify()

    def set_text(self, text: str) -> None:
        with self._lock:
            if text == self.text:
                return
            self.text = text
            self._rearm()
        self._notify()

    def set_voice(self, voice: str) -> None:
        with self._lock:
            if voice == self.voice:
                return
            self.voice = voice
            self._rearm()
        self._notify()

    def set_language(self, language: str, use_sample_text: bool = False) -> None:
        """
        Switch language.

        The voice resets to the language's first voice and the pinyin display
        is cleared unless the new language is Mandarin.
        """
        language = normalize_language(language)
        with self._lock:
            if language == self.language and not use_sample_text:
                return
            self.language = language
            self.voice = self.catalog.default_voice(language) or ""
            if language != MANDARIN:
                self.phonetic = ""
            if use_sample_text:
                self.text = self.catalog.sample_text(language) or self.text
            self._rearm()
        self._notify()

    def close(self) -> None:
        """Cancel the pending timer; late fetch results are ignored."""
        with self._lock:
            self._closed = True
            self._cancel_timer()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def available_voices(self):
        return self.catalog.voices(self.language)

    @property
    def show_phonetic(self) -> bool:
        return self.language == MANDARIN

    @property
    def is_fetching(self) -> bool:
        with self._lock:
            return self._fetching

    @property
    def can_play(self) -> bool:
        with self._lock:
            return self.audio is not None and not self._fetching

    @property
    def countdown(self) -> Optional[float]:
        """Seconds left before the fetch, rounded up to COUNTDOWN_STEP; None when not counting."""
        with self._lock:
            if self.state != ClientState.COUNTING_DOWN or self._deadline is None:
                return None
            remaining = self._deadline - self._clock()
        if remaining <= 0:
            return None
        steps = math.ceil(round(remaining / self.COUNTDOWN_STEP, 6))
        return round(steps * self.COUNTDOWN_STEP, 1)

    def current_request(self) -> SynthesisRequest:
        with self._lock:
            return SynthesisRequest(text=self.text, language=self.language, voice=self.voice or None)

    def get_stats(self) -> dict:
        with self._lock:
            return {
                "state": self.state.value,
                "language": self.language,
                "voice": self.voice,
                "has_audio": self.audio is not None,
                "phonetic": self.phonetic,
                "countdown": self.countdown,
                "total_fetches": self.total_fetches,
                "last_error": self.last_error,
            }

    # ------------------------------------------------------------------
    # Debounce / fetch
    # ------------------------------------------------------------------

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._deadline = None

    def _rearm(self) -> None:
        """Replace any pending timer. Caller holds the lock."""
        self._cancel_timer()
        self._generation += 1
        if self._closed:
            return

        if not self.text.strip():
            self.state = ClientState.IDLE
            return

        generation = self._generation
        timer = self._timer_factory(self.quiescence, lambda: self._on_timer(generation))
        timer.daemon = True
        self._timer = timer
        self._deadline = self._clock() + self.quiescence
        self.state = ClientState.COUNTING_DOWN
        timer.start()

    def _on_timer(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._closed:
                return
            self._timer = None
            self._deadline = None
            self.state = ClientState.FETCHING

            if self._fetching:
                # 已有请求在进行中: 不重叠，结束后再取最新输入
                logger.debug("[Debounce] Fetch in flight, deferring")
                self._fetch_deferred = True
                request = None
            else:
                self._fetching = True
                request = self.current_request()

        self._notify()
        if request is not None:
            self._run_fetch(request)

    def _run_fetch(self, request: SynthesisRequest) -> None:
        while request is not None:
            result, error = None, None
            with self._lock:
                self.total_fetches += 1
            try:
                result = self._fetch(request)
            except ClientFetchError as e:
                logger.warning(f"[Debounce] Fetch failed: {e}")
                error = e
            except Exception as e:
                logger.exception("[Debounce] Unexpected fetch error")
                error = e

            with self._lock:
                stale = self._closed or self.current_request() != request
                if not stale:
                    # 输入改回了本次请求的内容: 不需要再取一次
                    self._cancel_timer()
                    self._generation += 1
                    self._apply(result, error)

                request = None
                if self._fetch_deferred and stale and not self._closed and self.text.strip():
                    request = self.current_request()
                    self.state = ClientState.FETCHING
                self._fetch_deferred = False
                if request is None:
                    self._fetching = False

            self._notify()

    def _apply(self, result: Optional[SynthesisResult], error: Optional[Exception]) -> None:
        """Store a fetch outcome. Caller holds the lock."""
        if error is not None:
            self.state = ClientState.ERROR
            self.audio = None
            self.last_error = str(error)
            return

        self.state = ClientState.READY
        self.audio = result.audio
        self.last_error = None
        if result.phonetic and self.language == MANDARIN:
            self.phonetic = result.phonetic

    def _notify(self) -> None:
        if self.on_state_change:
            try:
                self.on_state_change(self)
            except Exception:
                logger.exception("[Debounce] on_state_change callback failed")
