"""Key-value persistence media the workout store reads from and writes to."""
from __future__ import annotations

import abc
import asyncio
import logging
import os
import re
import tempfile
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from workout_log.config import Settings
from workout_log.database import create_db_engine, init_db, make_session_factory
from workout_log.models.database_models import KeyValueEntry


logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class StorageMediumError(Exception):
    """Raised when a medium cannot read or write a value."""


class StorageMedium(abc.ABC):
    """String-keyed store holding opaque string values.

    Writing a single key must be atomic: a concurrent reader sees either the
    old or the new value, never a partial one.
    """

    name = "abstract"

    @abc.abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored under ``key`` or ``None`` if there is none."""

    @abc.abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""


class MemoryStorageMedium(StorageMedium):
    """Process-local medium, used for tests and throwaway sessions."""

    name = "memory"

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        self._values[key] = value


class FileStorageMedium(StorageMedium):
    """Stores each key as ``<directory>/<key>.json``."""

    name = "file"

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise StorageMediumError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read, self.path_for(key))

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, self.path_for(key), value)

    @staticmethod
    def _read(path: Path) -> str | None:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as err:
            logger.exception("Failed to read %s", path)
            raise StorageMediumError(f"Failed to read {path}: {err}") from err

    @staticmethod
    def _write(path: Path, value: str) -> None:
        # Temp file in the same directory so os.replace stays on one filesystem.
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=path.parent,
                prefix=f".{path.stem}.",
                suffix=".tmp",
                delete=False,
            ) as fh:
                tmp_name = fh.name
                fh.write(value)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, path)
        except OSError as err:
            logger.exception("Failed to write %s", path)
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageMediumError(f"Failed to write {path}: {err}") from err


class DatabaseStorageMedium(StorageMedium):
    """Stores each key as one row of the ``key_value_entries`` table."""

    name = "database"

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, key, value)

    def _read(self, key: str) -> str | None:
        db = self._session_factory()
        try:
            entry = db.get(KeyValueEntry, key)
            return entry.value if entry else None
        except SQLAlchemyError as err:
            logger.exception("Failed to read key %s from database", key)
            raise StorageMediumError(f"Failed to read {key!r}: {err}") from err
        finally:
            db.close()

    def _write(self, key: str, value: str) -> None:
        db = self._session_factory()
        try:
            entry = db.get(KeyValueEntry, key)
            if entry is None:
                db.add(KeyValueEntry(key=key, value=value))
            else:
                entry.value = value
            db.commit()
        except SQLAlchemyError as err:
            db.rollback()
            logger.exception("Failed to write key %s to database", key)
            raise StorageMediumError(f"Failed to write {key!r}: {err}") from err
        finally:
            db.close()


def build_storage_medium(settings: Settings) -> StorageMedium:
    """Create the medium selected by ``settings.storage_backend``."""

    if settings.storage_backend == "memory":
        return MemoryStorageMedium()
    if settings.storage_backend == "database":
        engine = create_db_engine(settings.database_url, echo=settings.debug)
        init_db(engine)
        return DatabaseStorageMedium(make_session_factory(engine))
    return FileStorageMedium(settings.data_dir)
