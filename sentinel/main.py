from sentinel.config.settings import Settings
from sentinel.database.repositories.factory import FileRepositoryFactory
from sentinel.lifecycle.manager import build_manager
from sentinel.logging.logger import Log
from sentinel.worker.sweeper import RetentionSweeper


def main() -> None:
    """Entry point: open repository -> build manager -> start retention sweeper."""
    settings = Settings()
    Log.configure(settings.log_level)
    repository = FileRepositoryFactory.create(settings)
    repository.open()

    try:
        manager = build_manager(settings, repository)
        try:
            RetentionSweeper(manager, settings).run()
        finally:
            manager.close()
    finally:
        repository.close()


if __name__ == "__main__":
    main()
