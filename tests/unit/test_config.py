"""Unit tests for AppSettings and sub-configs."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from config import AppSettings, DatabaseSettings, RedisSettings, VerificationSettings


@pytest.fixture
def with_mongo(monkeypatch):
    """Set the required MONGODB_URI so AppSettings can be instantiated."""
    monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
    return monkeypatch


class TestDatabaseSettings:
    def test_loads_mongodb_uri(self, with_mongo):
        assert DatabaseSettings().mongodb_uri == "mongodb://localhost:27017/"

    def test_defaults(self, with_mongo):
        with_mongo.delenv("DB_NAME", raising=False)
        with_mongo.delenv("USERS_COLLECTION", raising=False)
        s = DatabaseSettings()
        assert s.db_name == "cwt"
        assert s.users_collection == "users"

    def test_missing_mongodb_uri_raises(self, monkeypatch):
        monkeypatch.delenv("MONGODB_URI", raising=False)
        with pytest.raises(PydanticValidationError):
            DatabaseSettings()


class TestRedisSettings:
    def test_redis_uri_optional(self, monkeypatch):
        monkeypatch.delenv("REDIS_URI", raising=False)
        assert RedisSettings().redis_uri is None

    def test_redis_uri_loaded(self, monkeypatch):
        monkeypatch.setenv("REDIS_URI", "redis://localhost:6379")
        assert RedisSettings().redis_uri == "redis://localhost:6379"


class TestVerificationSettings:
    def test_defaults(self, verification_settings):
        s = verification_settings
        assert s.max_attempts == 4
        assert s.code_length == 6
        assert s.code_ttl_seconds == 600
        assert s.cooldown_seconds == 86_400
        assert s.sweep_interval_seconds == 60
        assert s.sweep_preserves_cooldown is True

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("VERIFICATION_MAX_ATTEMPTS", "6")
        monkeypatch.setenv("VERIFICATION_SWEEP_PRESERVES_COOLDOWN", "false")
        s = VerificationSettings()
        assert s.max_attempts == 6
        assert s.sweep_preserves_cooldown is False

    @pytest.mark.parametrize(
        "var", ["VERIFICATION_MAX_ATTEMPTS", "VERIFICATION_CODE_TTL_SECONDS"]
    )
    def test_rejects_non_positive(self, monkeypatch, var):
        monkeypatch.setenv(var, "0")
        with pytest.raises(PydanticValidationError):
            VerificationSettings()


@pytest.mark.parametrize(
    "env, expected",
    [("production", True), ("development", False)],
    ids=["production", "development"],
)
def test_is_production(with_mongo, env, expected):
    with_mongo.setenv("ENV", env)
    assert AppSettings().is_production is expected


class TestAppSettings:
    def test_sub_configs_populated(self, with_mongo):
        s = AppSettings()
        for attr in ("db", "redis", "email", "verification", "logging", "sentry"):
            assert getattr(s, attr) is not None, f"sub-config '{attr}' is None"

    def test_cors_origins_default(self, with_mongo):
        with_mongo.delenv("CORS_ORIGINS", raising=False)
        assert AppSettings().cors_origins == ["*"]
