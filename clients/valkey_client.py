"""
Valkey (Redis-compatible) client for the session store.

Thin wrapper around redis-py. Connection URL from Vault.
Fail-fast: raises on connection failure, never returns fallback values.
Each method is a single round-trip; callers compose them without
multi-key transactions.
"""

import json
import logging

import redis

logger = logging.getLogger(__name__)


class ValkeyClient:
    """
    Redis-compatible client for Valkey.

    Usage:
        client = ValkeyClient("redis://localhost:6379/0")
        client.set_json("session:abc", {"user_id": 1}, expire_seconds=604800)
        record = client.get_json("session:abc")  # None if missing or expired
    """

    def __init__(self, url: str):
        """
        Connect and verify connectivity.

        Raises:
            redis.ConnectionError: If the server is unreachable
        """
        self._client = redis.from_url(url, decode_responses=True)
        self._client.ping()
        logger.info("ValkeyClient connected")

    def ping(self) -> bool:
        """Health check. Raises redis.ConnectionError if unreachable."""
        self._client.ping()
        return True

    def get(self, key: str) -> str | None:
        """Value for key, or None if missing (not an error)."""
        return self._client.get(key)

    def set(self, key: str, value: str, expire_seconds: int | None = None) -> None:
        """Set key, with a TTL when expire_seconds is given."""
        if expire_seconds is not None:
            self._client.setex(key, expire_seconds, value)
        else:
            self._client.set(key, value)

    def delete(self, *keys: str) -> int:
        """Delete keys. Returns how many existed; deleting missing keys is fine."""
        if not keys:
            return 0
        return self._client.delete(*keys)

    def exists(self, key: str) -> bool:
        return self._client.exists(key) > 0

    def ttl(self, key: str) -> int:
        """
        Remaining TTL in seconds.

        Returns -2 if the key doesn't exist, -1 if it has no expiration.
        """
        return self._client.ttl(key)

    def expire(self, key: str, seconds: int) -> None:
        self._client.expire(key, seconds)

    def add_to_set(self, key: str, member: str) -> None:
        self._client.sadd(key, member)

    def remove_from_set(self, key: str, member: str) -> None:
        self._client.srem(key, member)

    def set_members(self, key: str) -> "set[str]":
        """Members of a set. Empty set if the key is missing."""
        return set(self._client.smembers(key))

    def set_json(self, key: str, value: dict | list, expire_seconds: int | None = None) -> None:
        """Store a JSON-serialized value."""
        self.set(key, json.dumps(value), expire_seconds)

    def get_json(self, key: str) -> dict | list | None:
        """
        Load a JSON value.

        Returns None if key doesn't exist.
        Raises ValueError if the stored value is not valid JSON.
        """
        value = self.get(key)
        if value is None:
            return None
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in key '{key}': {e}")

    def close(self) -> None:
        self._client.close()
        logger.info("ValkeyClient closed")
