"""Tests for ValkeyClient - redis-py patched out."""

from unittest.mock import patch

import pytest
import redis

from clients.valkey_client import ValkeyClient


@pytest.fixture
def redis_mock():
    with patch("clients.valkey_client.redis.from_url") as from_url:
        yield from_url.return_value


@pytest.fixture
def client(redis_mock):
    return ValkeyClient("redis://localhost:6379/0")


class TestValkeyClientInit:

    def test_pings_on_connect(self, redis_mock):
        ValkeyClient("redis://localhost:6379/0")
        redis_mock.ping.assert_called_once()

    def test_connection_failure_propagates(self, redis_mock):
        redis_mock.ping.side_effect = redis.ConnectionError("refused")

        with pytest.raises(redis.ConnectionError):
            ValkeyClient("redis://localhost:6379/0")


class TestOperations:

    def test_set_with_expiry_uses_setex(self, client, redis_mock):
        client.set("otp:1", "v", expire_seconds=300)
        redis_mock.setex.assert_called_once_with("otp:1", 300, "v")

    def test_set_without_expiry(self, client, redis_mock):
        client.set("k", "v")
        redis_mock.set.assert_called_once_with("k", "v")

    def test_delete_reports_existence(self, client, redis_mock):
        redis_mock.delete.return_value = 0
        assert client.delete("missing") is False

    def test_json_round_trip(self, client, redis_mock):
        client.set_json("otp:1", {"otp": "1234"}, expire_seconds=60)
        stored = redis_mock.setex.call_args.args[2]
        redis_mock.get.return_value = stored

        assert client.get_json("otp:1") == {"otp": "1234"}

    def test_get_json_missing(self, client, redis_mock):
        redis_mock.get.return_value = None
        assert client.get_json("nope") is None

    def test_get_json_invalid(self, client, redis_mock):
        redis_mock.get.return_value = "{not json"

        with pytest.raises(ValueError, match="Invalid JSON"):
            client.get_json("bad")
