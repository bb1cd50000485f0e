"""Keyed text-blob persistence backends used by the record store."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Callable, Optional, Protocol

from loguru import logger
from sqlalchemy.orm import Session

from .config import Settings
from .database import build_engine, build_session_factory, db_session
from .models import StorageBlob


class BlobStorage(Protocol):
    def read(self, key: str) -> Optional[str]:
        ...

    def write(self, key: str, value: str) -> None:
        ...


class SqlBlobStorage:
    """Stores each blob as one row of the ``storage_blobs`` table."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def read(self, key: str) -> Optional[str]:
        with db_session(self._session_factory) as session:
            record = session.get(StorageBlob, key)
            return record.value if record else None

    def write(self, key: str, value: str) -> None:
        with db_session(self._session_factory) as session:
            record = session.get(StorageBlob, key)
            if record:
                record.value = value
            else:
                session.add(StorageBlob(key=key, value=value))


class JsonFileBlobStorage:
    """Stores each blob as ``<key>.json`` inside a directory."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        safe_key = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in key)
        return self.directory / f"{safe_key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, key: str, value: str) -> None:
        path = self._path(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


def build_storage(config: Settings) -> BlobStorage:
    if config.storage_backend == "sqlite":
        logger.info(f"Using SQLite storage at {config.sqlite_path}")
        engine = build_engine(config.sqlite_path)
        return SqlBlobStorage(build_session_factory(engine))
    if config.storage_backend == "json":
        logger.info(f"Using JSON storage in {config.json_dir}")
        return JsonFileBlobStorage(config.json_dir)
    raise NotImplementedError(f"Unsupported storage backend: {config.storage_backend}")
