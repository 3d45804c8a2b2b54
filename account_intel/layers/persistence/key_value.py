"""
Key-Value Account Store

Stores each account as one JSON document. Uses Redis when a URL (or a
client) is provided, otherwise an in-process dictionary. Every save is a
single write of the whole aggregate, so it either fully lands or not at
all.

Layout: one Redis hash named by ``key_prefix``; field = account id,
value = account JSON.
"""

import json
import logging
from typing import Any, Optional

from ...core.entities import Account
from ...core.exceptions import StorageError
from .ports import AccountRepository, BatchResult


logger = logging.getLogger(__name__)


class KeyValueAccountStore(AccountRepository):
    """
    Whole-aggregate account storage.

    Uses Redis for persistence when configured, falls back to in-memory.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        key_prefix: str = "accounts",
        client: Any = None
    ):
        self._redis_url = redis_url
        self._key = key_prefix
        self._redis_client = client
        self._in_memory_store: dict[str, str] = {}

    @classmethod
    def from_settings(cls, config=None) -> "KeyValueAccountStore":
        from ...config.settings import get_settings
        config = config or get_settings().storage
        return cls(redis_url=config.redis_url, key_prefix=config.key_prefix)

    @property
    def is_persistent(self) -> bool:
        """Check if using persistent backend."""
        return self._redis_client is not None

    def init(self) -> None:
        """Connect to Redis if configured."""
        if self._redis_client is None and self._redis_url:
            import redis
            self._redis_client = redis.from_url(self._redis_url)

        if self._redis_client is not None:
            try:
                self._redis_client.ping()
            except Exception as e:
                raise StorageError(f"Redis unavailable at {self._redis_url}: {e}") from e

    # -------------------------------------------------------------------------
    # Raw access
    # -------------------------------------------------------------------------

    def _read(self, account_id: str) -> Optional[str]:
        if self._redis_client:
            data = self._redis_client.hget(self._key, account_id)
            if isinstance(data, bytes):
                data = data.decode("utf-8")
            return data
        return self._in_memory_store.get(account_id)

    def _read_all(self) -> list:
        if self._redis_client:
            values = self._redis_client.hvals(self._key)
            return [v.decode("utf-8") if isinstance(v, bytes) else v for v in values]
        return list(self._in_memory_store.values())

    def _write(self, account_id: str, document: str) -> None:
        if self._redis_client:
            self._redis_client.hset(self._key, account_id, document)
        else:
            self._in_memory_store[account_id] = document

    def _remove(self, account_id: str) -> None:
        if self._redis_client:
            self._redis_client.hdel(self._key, account_id)
        else:
            self._in_memory_store.pop(account_id, None)

    @staticmethod
    def _decode(document: Optional[str]) -> Optional[Account]:
        if not document:
            return None
        try:
            return Account.from_dict(json.loads(document))
        except (ValueError, TypeError, AttributeError) as e:
            logger.error("Error loading account document: %s", e)
            return None

    # -------------------------------------------------------------------------
    # Repository contract
    # -------------------------------------------------------------------------

    def load(self, account_id: str) -> Optional[Account]:
        return self._decode(self._read(account_id))

    def save(self, account: Account) -> BatchResult:
        result = BatchResult()
        try:
            self._write(account.id, json.dumps(account.to_dict()))
            result.record(f"account:{account.id}")
        except Exception as e:
            logger.error("Error saving account %s: %s", account.id, e)
            result.fail(f"account:{account.id}", e)
        return result

    def delete(self, account_id: str) -> BatchResult:
        result = BatchResult()
        try:
            self._remove(account_id)
            result.record(f"account:{account_id}")
        except Exception as e:
            logger.error("Error deleting account %s: %s", account_id, e)
            result.fail(f"account:{account_id}", e)
        return result

    def list_accounts(self) -> list:
        accounts = [self._decode(doc) for doc in self._read_all()]
        return [a for a in accounts if a is not None]

    def clear(self) -> None:
        if self._redis_client:
            self._redis_client.delete(self._key)
        else:
            self._in_memory_store.clear()
