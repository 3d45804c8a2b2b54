"""
Tests for the key-value account store, in-memory and against a
Redis-compatible client double.
"""

import pytest

from account_intel.core.entities import Account
from account_intel.core.exceptions import AccountNotFoundError, StorageError
from account_intel.layers.persistence import KeyValueAccountStore


class FakeRedis:
    """The subset of the redis client API the store uses; stores bytes like redis does."""

    def __init__(self, reachable: bool = True):
        self.reachable = reachable
        self.hashes = {}
        self.calls = []

    def ping(self):
        if not self.reachable:
            raise ConnectionError("connection refused")
        return True

    def hset(self, name, key, value):
        self.calls.append(("hset", name, key))
        self.hashes.setdefault(name, {})[key] = value.encode("utf-8")

    def hget(self, name, key):
        return self.hashes.get(name, {}).get(key)

    def hvals(self, name):
        return list(self.hashes.get(name, {}).values())

    def hdel(self, name, key):
        self.hashes.get(name, {}).pop(key, None)

    def delete(self, name):
        self.hashes.pop(name, None)


@pytest.fixture
def memory_store():
    store = KeyValueAccountStore()
    store.init()
    return store


class TestInMemory:

    def test_not_persistent(self, memory_store):
        assert memory_store.is_persistent is False

    def test_save_and_load(self, memory_store, account):
        result = memory_store.save(account)
        assert result.errors == []
        assert result.summary() == "Succeeded (1 applied)"
        assert memory_store.load(account.id) == account

    def test_loaded_copy_is_independent(self, memory_store, account):
        memory_store.save(account)
        loaded = memory_store.load(account.id)
        loaded.stakeholders.clear()
        assert len(memory_store.load(account.id).stakeholders) == 1

    def test_load_missing(self, memory_store):
        assert memory_store.load("nope") is None
        with pytest.raises(AccountNotFoundError):
            memory_store.get("nope")

    def test_delete_and_clear(self, memory_store, account, ids):
        other = Account.create("Other", id_generator=ids)
        memory_store.save(account)
        memory_store.save(other)
        assert len(memory_store.list_accounts()) == 2

        memory_store.delete(account.id)
        assert [a.name for a in memory_store.list_accounts()] == ["Other"]

        memory_store.clear()
        assert memory_store.list_accounts() == []


class TestRedisBackend:

    def test_whole_aggregate_in_one_write(self, account):
        client = FakeRedis()
        store = KeyValueAccountStore(key_prefix="crm:accounts", client=client)
        store.init()

        store.save(account)
        assert client.calls == [("hset", "crm:accounts", account.id)]
        assert store.is_persistent
        assert store.load(account.id) == account
        assert [a.id for a in store.list_accounts()] == [account.id]

    def test_unreachable_raises_on_init(self):
        store = KeyValueAccountStore(redis_url="redis://nowhere:6379/0", client=FakeRedis(reachable=False))
        with pytest.raises(StorageError):
            store.init()

    def test_corrupt_document_skipped(self, account):
        client = FakeRedis()
        store = KeyValueAccountStore(client=client)
        store.save(account)
        client.hashes["accounts"]["broken"] = b"{not json"
        assert store.load("broken") is None
        assert [a.id for a in store.list_accounts()] == [account.id]

    def test_write_failure_collected(self, account):
        class FailingRedis(FakeRedis):
            def hset(self, name, key, value):
                raise ConnectionError("timeout")

        store = KeyValueAccountStore(client=FailingRedis())
        result = store.save(account)
        assert result.has_errors
        assert result.applied == []
        assert "timeout" in result.errors[0]
