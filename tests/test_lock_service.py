"""LockService na zamockowanym kliencie redisa."""

from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from storefront.services.lock_service import LockService, _RELEASE_LUA


@pytest.fixture
def redis_client():
    return MagicMock()


@pytest.fixture
def locks(redis_client):
    return LockService(client=redis_client)


class TestLockService:
    def test_acquire_uses_set_nx_with_ttl(self, locks, redis_client):
        redis_client.set.return_value = True

        assert locks.acquire_checkout_lock(7, "token-1", ttl=30) is True
        redis_client.set.assert_called_once_with(
            name="checkout:user:7:lock", value="token-1", nx=True, ex=30
        )

    def test_acquire_returns_false_when_held(self, locks, redis_client):
        redis_client.set.return_value = None

        assert locks.acquire_checkout_lock(7, "token-1", ttl=30) is False

    def test_release_is_compare_and_delete(self, locks, redis_client):
        redis_client.eval.return_value = 1

        assert locks.release_checkout_lock(7, "token-1") is True
        redis_client.eval.assert_called_once_with(_RELEASE_LUA, 1, "checkout:user:7:lock", "token-1")

    def test_release_by_other_owner_is_noop(self, locks, redis_client):
        redis_client.eval.return_value = 0

        assert locks.release_checkout_lock(7, "not-mine") is False

    def test_retries_transient_redis_errors(self, locks, redis_client):
        redis_client.set.side_effect = [RedisConnectionError("down"), True]

        assert locks.acquire_checkout_lock(7, "token-1", ttl=30) is True
        assert redis_client.set.call_count == 2

    def test_gives_up_after_three_attempts(self, locks, redis_client):
        redis_client.set.side_effect = RedisConnectionError("down")

        with pytest.raises(RedisConnectionError):
            locks.acquire_checkout_lock(7, "token-1", ttl=30)
        assert redis_client.set.call_count == 3
