import os
from collections.abc import Generator

import pytest

from sentinel.config.settings import Settings
from sentinel.database.connection import Database
from sentinel.database.repositories.postgres_file_repository import PostgresFileRepository


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "sentinel_test")
    return Settings(db_connect_timeout_seconds=3.0)


@pytest.fixture(scope="session")
def pg_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def pg_repository(pg_settings: Settings) -> Generator[PostgresFileRepository, None, None]:
    repository = PostgresFileRepository(Database(pg_settings))
    try:
        repository.open()
    except Exception as e:
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run these tests")
    try:
        yield repository
    finally:
        repository.close()


@pytest.fixture
def integration_cleanup(
    pg_repository: PostgresFileRepository,
) -> Generator[list[str], None, None]:
    created: list[str] = []
    yield created
    for file_id in created:
        pg_repository.delete(file_id)
