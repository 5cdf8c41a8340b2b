"""Tests for settings validation and database adapter selection."""

import logging

import pytest

from urlsh.core.exceptions import ConfigurationError
from urlsh.core.setting import Settings, check_settings, validate_settings
from urlsh.db.postgres_adapter import PostgreSQLAdapter
from urlsh.db.session import get_database_adapter
from urlsh.db.sqlite_adapter import SQLiteAdapter


def make_settings(**overrides) -> Settings:
    values = {
        "DATABASE_URL": "sqlite+aiosqlite:///./test.db",
        "BASE_URL": "https://sho.rt",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def levels(messages):
    return [level for level, _ in messages]


class TestValidateSettings:

    def test_clean_configuration(self):
        assert validate_settings(make_settings()) == []

    def test_missing_database_url(self):
        messages = validate_settings(make_settings(DATABASE_URL=""))
        assert (logging.ERROR, "database URL is required") in messages

    @pytest.mark.parametrize("port", [0, -1, 65536])
    def test_port_out_of_range(self, port):
        messages = validate_settings(make_settings(PORT=port))
        assert (logging.ERROR, "port must be between 1 and 65535") in messages

    def test_missing_base_url(self):
        messages = validate_settings(make_settings(BASE_URL=""))
        assert (logging.ERROR, "base URL is required") in messages

    def test_plain_http_base_url_warns(self):
        messages = validate_settings(make_settings(BASE_URL="http://localhost:8090"))
        assert levels(messages) == [logging.WARNING]

    def test_max_url_length(self):
        assert logging.ERROR in levels(validate_settings(make_settings(MAX_URL_LENGTH=0)))
        assert levels(validate_settings(make_settings(MAX_URL_LENGTH=4096))) == [logging.WARNING]

    def test_negative_ttl(self):
        assert logging.ERROR in levels(validate_settings(make_settings(LINK_TTL_HOURS=-1)))


class TestCheckSettings:

    def test_warnings_do_not_fail(self, caplog):
        with caplog.at_level(logging.WARNING):
            check_settings(make_settings(BASE_URL="http://localhost:8090"))
        assert "non-HTTPS" in caplog.text

    def test_errors_fail(self, caplog):
        with caplog.at_level(logging.ERROR):
            with pytest.raises(ConfigurationError):
                check_settings(make_settings(PORT=0, BASE_URL=""))
        assert "port must be between 1 and 65535" in caplog.text
        assert "base URL is required" in caplog.text


class TestDatabaseAdapter:

    def test_sqlite(self):
        adapter = get_database_adapter(make_settings())
        assert isinstance(adapter, SQLiteAdapter)
        assert adapter.get_dialect_name() == "sqlite"

    def test_postgresql_pool_sizing(self):
        adapter = get_database_adapter(make_settings(
            DATABASE_URL="postgresql+asyncpg://user:pw@db:5432/urls",
            DB_MAX_OPEN_CONNS=20,
            DB_MAX_IDLE_CONNS=5,
            DB_MAX_IDLE_TIME=60,
        ))
        assert isinstance(adapter, PostgreSQLAdapter)
        kwargs = adapter.get_engine_kwargs()
        assert kwargs["pool_size"] == 5
        assert kwargs["max_overflow"] == 15
        assert kwargs["pool_recycle"] == 60

    def test_unsupported_backend(self):
        with pytest.raises(ConfigurationError):
            get_database_adapter(make_settings(DATABASE_URL="mysql+aiomysql://u:p@h/db"))
