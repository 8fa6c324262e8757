from __future__ import annotations

import asyncio
import os
import re
import tempfile
from pathlib import Path

from cityweather.core.config import Settings
from cityweather.db.base import KeyValueStorage

KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{1,128}$")


class InMemoryKeyValueStorage:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._items.get(key)

    async def set(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileKeyValueStorage:
    """Stores each key as ``<directory>/<key>.json``.

    Writes land in a temporary file in the same directory and are renamed over
    the target, so a reader never sees a half-written document.
    """

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._directory / f"{key}.json"

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read, self._path(key))

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, self._path(key), value)

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self._path(key).unlink, missing_ok=True)

    @staticmethod
    def _read(path: Path) -> str | None:
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    @staticmethod
    def _write(path: Path, value: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


def create_kv_storage(settings: Settings) -> KeyValueStorage:
    if settings.storage_backend == "memory":
        return InMemoryKeyValueStorage()
    return JsonFileKeyValueStorage(settings.storage_dir)
