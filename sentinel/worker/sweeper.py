import time

from sentinel.config.settings import Settings
from sentinel.lifecycle.manager import FileLifecycleManager
from sentinel.lifecycle.models import SweepReport
from sentinel.logging.logger import Log


class RetentionSweeper:
    """Poll loop: sweep -> sleep."""

    def __init__(self, manager: FileLifecycleManager, settings: Settings) -> None:
        self._manager = manager
        self._settings = settings

    def run(self, max_runs: int | None = None) -> None:
        """Main loop. Runs forever until interrupted.

        If max_runs is set, stop after that many sweeps (for testing).
        """
        Log.info(
            f"Retention sweeper started, window {self._settings.retention_hours}h, "
            f"interval {self._settings.sweep_interval_seconds}s"
        )
        runs = 0
        try:
            while True:
                self._try_sweep()
                runs += 1
                if max_runs is not None and runs >= max_runs:
                    break
                time.sleep(self._settings.sweep_interval_seconds)
        except KeyboardInterrupt:
            Log.info("Retention sweeper shutting down gracefully")

    def _try_sweep(self) -> SweepReport | None:
        """Run one sweep. Errors are logged and retried on the next tick."""
        try:
            return self._manager.sweep()
        except Exception as exc:
            Log.warning(f"Sweep failed, will retry: {exc}")
            return None
