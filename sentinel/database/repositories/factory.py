from sentinel.config.settings import Settings
from sentinel.database.connection import Database
from sentinel.database.repositories.base import BaseFileRepository
from sentinel.database.repositories.memory_file_repository import InMemoryFileRepository
from sentinel.database.repositories.postgres_file_repository import PostgresFileRepository


class FileRepositoryFactory:
    """Creates the record store selected by settings.repository_backend."""

    BACKENDS = ("postgres", "memory")

    @classmethod
    def create(cls, settings: Settings) -> BaseFileRepository:
        backend = settings.repository_backend.lower()
        if backend == "postgres":
            return PostgresFileRepository(Database(settings))
        if backend == "memory":
            return InMemoryFileRepository()
        raise ValueError(
            f"Unknown repository backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
