"""
Local JSON File Storage

Mirrors the item list into a single JSON document:

    {"licenses": [{"name": "...", "price": 20.0, "sourceUrl": "..."}]}

This is the same shape the browser extension kept in its local storage
area, so exported extension data can be dropped in as-is.

File I/O runs in a worker thread. Writes go to a temporary file that is
then moved into place.
"""

import asyncio
import os
from pathlib import Path
from typing import Sequence, Union

import orjson
import structlog

from license_calculator.models.item import Item
from license_calculator.services.storage.interface import ItemStorageInterface


STORAGE_KEY = "licenses"

logger = structlog.get_logger(__name__)


class JsonFileItemStorage(ItemStorageInterface):
    """JSON file implementation of item storage."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_sync(self) -> list[Item]:
        if not self._path.exists():
            return []

        data = orjson.loads(self._path.read_bytes())

        if not isinstance(data, dict):
            raise ValueError(f"{self._path} must contain a JSON object")

        records = data.get(STORAGE_KEY) or []
        if not isinstance(records, list):
            raise ValueError(f"'{STORAGE_KEY}' in {self._path} must be a list")

        return [Item.from_record(r) for r in records if isinstance(r, dict)]

    def _write_sync(self, items: Sequence[Item]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = {STORAGE_KEY: [item.to_record() for item in items]}

        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2))
        os.replace(tmp_path, self._path)

    async def read(self) -> list[Item]:
        items = await asyncio.to_thread(self._read_sync)
        logger.debug("json_store_read", path=str(self._path), item_count=len(items))
        return items

    async def write(self, items: Sequence[Item]) -> None:
        snapshot = list(items)
        await asyncio.to_thread(self._write_sync, snapshot)
        logger.debug("json_store_written", path=str(self._path), item_count=len(snapshot))
