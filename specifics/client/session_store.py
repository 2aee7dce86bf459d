"""
Session store - listing drafts kept as JSON blobs in Redis with a fixed TTL.
"""
import json
import logging
import uuid
from typing import Any, Optional

import redis

from ..config import SessionConfig, get_config


logger = logging.getLogger(__name__)


class SessionStore:
    """Opaque key -> JSON blob store with expiry."""

    def __init__(self, client: Optional[Any] = None, config: Optional[SessionConfig] = None):
        self.config = config or get_config().session
        # from_url does not connect until the first command
        self.client = client if client is not None else redis.Redis.from_url(
            self.config.redis_url, decode_responses=True
        )

    def _key(self, session_id: str) -> str:
        return f"{self.config.key_prefix}{session_id}"

    @staticmethod
    def new_session_id() -> str:
        return uuid.uuid4().hex

    def save(self, data: dict[str, Any], session_id: Optional[str] = None) -> str:
        """Store a blob and return its session id."""
        session_id = session_id or self.new_session_id()
        self.client.set(
            self._key(session_id),
            json.dumps(data, default=str),
            ex=self.config.ttl_seconds,
        )
        logger.info(f"Stored session {session_id} (ttl {self.config.ttl_seconds}s)")
        return session_id

    def load(self, session_id: str) -> Optional[dict[str, Any]]:
        """Blob for a session, or None when missing, expired or unreadable."""
        if not session_id:
            return None
        raw = self.client.get(self._key(session_id))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Session {session_id} holds invalid JSON: {e}")
            return None

    def delete(self, session_id: str) -> bool:
        return bool(self.client.delete(self._key(session_id)))
