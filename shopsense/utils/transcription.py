import logging
import threading
import uuid

from shopsense.errors import StaleTranscription

logger = logging.getLogger(__name__)

# Final utterances this short are microphone noise, not orders
MIN_UTTERANCE_CHARS = 4


class TranscriptionListener:
    """
    Gate between the client's speech recognizer and the cart.

    Each start() hands out a fresh token and invalidates the previous one;
    stop() and report_error() invalidate the current one. A result is applied
    only while its token is still the active one, so a recognizer that was
    restarted or stopped while an utterance was in flight cannot add a stale
    line to the cart.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._token = None
        self.last_error = None

    @property
    def is_listening(self) -> bool:
        return self._token is not None

    def start(self) -> str:
        with self._lock:
            if self._token is not None:
                logger.info("Listen session %s replaced", self._token)
            self._token = uuid.uuid4().hex
            self.last_error = None
            return self._token

    def stop(self, token: str = None):
        with self._lock:
            if token is None or token == self._token:
                self._token = None

    def report_error(self, token: str, message: str):
        with self._lock:
            if token != self._token:
                return
            logger.warning("Speech recognition error: %s", message)
            self.last_error = message
            self._token = None

    def accept(self, token: str, text: str, apply=None):
        """
        Return the utterance to process, or None when it is just noise.
        Raises StaleTranscription for results from an inactive session.

        With `apply`, the utterance is handed to it while the lock is still
        held and its return value is returned instead. A stop() that races the
        result either lands first, making the result stale, or waits until
        the line has been applied.
        """
        with self._lock:
            if self._token is None or token != self._token:
                logger.info("Discarded stale voice result %r", text)
                raise StaleTranscription()

            text = (text or "").strip()
            if len(text.replace(" ", "")) < MIN_UTTERANCE_CHARS:
                return None
            if apply is None:
                return text
            return apply(text)
