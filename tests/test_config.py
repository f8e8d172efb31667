"""
Tests for application settings - app/core/config.py
"""
import warnings

import pytest
from pydantic import ValidationError

from app.core.config import Settings


_SECRET = "x" * 64


class TestDatabaseUrl:

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("postgres://u:p@db:5432/spbu", "postgresql+asyncpg://u:p@db:5432/spbu"),
            ("postgresql://u:p@db:5432/spbu", "postgresql+asyncpg://u:p@db:5432/spbu"),
            ("postgresql+asyncpg://u:p@db:5432/spbu", "postgresql+asyncpg://u:p@db:5432/spbu"),
            ("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite:///:memory:"),
        ],
    )
    def test_async_driver_is_forced(self, raw, expected):
        settings = Settings(DATABASE_URL=raw, JWT_SECRET_KEY=_SECRET, _env_file=None)
        assert settings.DATABASE_URL == expected


class TestProductionChecks:

    @pytest.mark.unit
    def test_missing_secret_fails_in_production(self, monkeypatch):
        monkeypatch.delenv("JWT_SECRET_KEY", raising=False)

        with pytest.raises(ValidationError, match="JWT_SECRET_KEY"):
            Settings(DEBUG=False, JWT_SECRET_KEY="", _env_file=None)

    @pytest.mark.unit
    def test_missing_secret_only_warns_in_debug(self):
        with pytest.warns(UserWarning, match="JWT_SECRET_KEY"):
            settings = Settings(DEBUG=True, JWT_SECRET_KEY="", DATABASE_URL="sqlite+aiosqlite:///:memory:", _env_file=None)
        assert settings.JWT_SECRET_KEY == ""

    @pytest.mark.unit
    def test_debug_with_remote_db_warns(self):
        with pytest.warns(UserWarning, match="DEBUG=True"):
            Settings(
                DEBUG=True,
                JWT_SECRET_KEY=_SECRET,
                DATABASE_URL="postgresql://u:p@db.internal:5432/spbu",
                _env_file=None,
            )

    @pytest.mark.unit
    def test_production_with_secret_is_quiet(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            settings = Settings(
                DEBUG=False,
                JWT_SECRET_KEY=_SECRET,
                DATABASE_URL="postgresql://u:p@db.internal:5432/spbu",
                _env_file=None,
            )
        assert not [w for w in caught if issubclass(w.category, UserWarning) and "JWT_SECRET_KEY" in str(w.message)]
        assert not [w for w in caught if "DEBUG=True" in str(w.message)]
        assert settings.JWT_ALGORITHM == "HS256"
        assert settings.JWT_ACCESS_TOKEN_EXPIRE_DAYS == 30


class TestTokenLifetime:

    @pytest.mark.unit
    @pytest.mark.parametrize("days", [0, -1])
    def test_expire_days_must_be_positive(self, days):
        with pytest.raises(ValidationError):
            Settings(JWT_SECRET_KEY=_SECRET, JWT_ACCESS_TOKEN_EXPIRE_DAYS=days, _env_file=None)

    @pytest.mark.unit
    def test_expire_days_from_environment(self, monkeypatch):
        monkeypatch.setenv("JWT_ACCESS_TOKEN_EXPIRE_DAYS", "7")

        settings = Settings(JWT_SECRET_KEY=_SECRET, _env_file=None)

        assert settings.JWT_ACCESS_TOKEN_EXPIRE_DAYS == 7
