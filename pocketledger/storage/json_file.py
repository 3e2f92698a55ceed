"""
JSON file storage.

One file per collection inside a data directory, named after the
collection (``transactions.json``, ``savingsGoals.json`` ...). This is the
on-device backend; its file names match the browser local storage keys,
so exported data can be dropped in as-is.
"""

import json
import os
from pathlib import Path
from typing import Any, Union

import structlog

from pocketledger.models.ledger import Collection
from pocketledger.storage.interface import LedgerStorageInterface, StorageError


logger = structlog.get_logger(__name__)


class JsonFileStorage(LedgerStorageInterface):
    """Stores each collection as a JSON document on disk."""

    def __init__(self, data_dir: Union[str, Path]):
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, name: Collection) -> Path:
        return self._data_dir / f"{Collection(name).value}.json"

    def load_all(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if not self._data_dir.exists():
            logger.info("json_storage_empty", data_dir=str(self._data_dir))
            return data

        for collection in Collection:
            path = self.path_for(collection)
            if not path.exists():
                continue
            try:
                with path.open("r", encoding="utf-8") as fh:
                    data[collection.value] = json.load(fh)
            except json.JSONDecodeError as e:
                # A corrupt collection falls back to its default; the rest still load
                logger.warning(
                    "json_collection_corrupt",
                    collection=collection.value,
                    path=str(path),
                    error=str(e),
                )
            except OSError as e:
                raise StorageError(f"Failed to read {path}: {e}")
        return data

    def save_collection(self, name: Collection, value: Any) -> None:
        path = self.path_for(name)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as fh:
                json.dump(value, fh, ensure_ascii=False, indent=2)
                fh.flush()
                os.fsync(fh.fileno())
            tmp_path.replace(path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to save {path.name}: {e}")
