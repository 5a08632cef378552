"""Remembers which client sessions already ran a hook-mode install."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

_MAX_SESSIONS = 500


class SessionCache:
    """Newline-separated session IDs stored in `~/.sx/cache/sessions-<client>`.

    Only the most recent sessions are kept.
    """

    def __init__(self, cache_dir: Path, client_id: str) -> None:
        self._path = cache_dir / f"sessions-{client_id}"

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> list[str]:
        if not self._path.exists():
            return []
        return [line for line in self._path.read_text(encoding="utf-8").splitlines() if line]

    def has_session(self, session_id: str) -> bool:
        return session_id in self._read()

    def record_session(self, session_id: str) -> None:
        sessions = [s for s in self._read() if s != session_id]
        sessions.append(session_id)
        sessions = sessions[-_MAX_SESSIONS:]
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text("\n".join(sessions) + "\n", encoding="utf-8")
        logger.debug("Recorded session %s in %s", session_id, self._path)
