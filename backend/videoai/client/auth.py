import json
import logging
import os
import threading
from typing import Optional

logger = logging.getLogger(__name__)


class TokenStore:
    """
    persisted login state: the bearer token and the user it belongs to.
    with no path the state lives in memory for the life of the process.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path or None
        self._lock = threading.Lock()
        self._state = {}
        if self.path and os.path.exists(self.path):
            try:
                with open(self.path, "r") as f:
                    self._state = json.load(f)
            except (OSError, ValueError) as e:
                logger.warning(f"ignoring unreadable session file {self.path}: {e}")
                self._state = {}

    @property
    def token(self) -> Optional[str]:
        return self._state.get("authToken")

    @property
    def user(self) -> Optional[dict]:
        return self._state.get("user")

    def save(self, token: str, user: Optional[dict] = None):
        with self._lock:
            self._state = {"authToken": token, "user": user}
            self._flush()

    def clear(self):
        with self._lock:
            self._state = {}
            if self.path and os.path.exists(self.path):
                os.remove(self.path)

    def _flush(self):
        if not self.path:
            return
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(self._state, f)
        os.chmod(self.path, 0o600)
