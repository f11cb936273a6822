import uuid
from pathlib import Path
from typing import BinaryIO

from sentinel.lifecycle.exceptions import ArtifactMissingError
from sentinel.logging.logger import Log


class ArtifactStore:
    """Resolves and manages artifact files for file records.

    Layout:
        {upload_dir}/{file_id}{ext}                       original upload
        {output_dir}/processed_{file_id}_{run}{ext}       full-resolution result
        {output_dir}/processed_{file_id}_{run}_preview.png
    """

    def __init__(self, upload_dir: Path, output_dir: Path) -> None:
        self._upload_dir = upload_dir
        self._output_dir = output_dir
        self._upload_dir.mkdir(parents=True, exist_ok=True)
        self._output_dir.mkdir(parents=True, exist_ok=True)

    @property
    def upload_dir(self) -> Path:
        return self._upload_dir

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def save_upload(self, file_id: str, extension: str, data: bytes) -> Path:
        path = self._upload_dir / f"{file_id}{extension}"
        path.write_bytes(data)
        return path

    def new_processed_path(self, file_id: str, extension: str) -> Path:
        """A fresh output path per run, so a failed re-run never clobbers the last result."""
        return self._output_dir / f"processed_{file_id}_{uuid.uuid4().hex[:8]}{extension}"

    def open(self, path: Path | None) -> BinaryIO:
        """Open an artifact for reading.

        Raises:
            ArtifactMissingError: if there is no such artifact on disk.
        """
        if path is None:
            raise ArtifactMissingError("Artifact has not been produced")
        try:
            return path.open("rb")
        except FileNotFoundError as exc:
            raise ArtifactMissingError(f"Artifact not found: {path.name}") from exc

    @staticmethod
    def exists(path: Path | None) -> bool:
        return path is not None and path.is_file()

    @staticmethod
    def remove(path: Path) -> bool:
        """Delete an artifact. Returns False if it was already gone."""
        try:
            path.unlink()
        except FileNotFoundError:
            Log.warning(f"Artifact already missing: {path}")
            return False
        return True
