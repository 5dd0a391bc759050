"""File-based row store adapter.

Implements RowStore on the local filesystem. Each sheet is a JSON document
holding its grid; a manifest keeps sheet creation order.

Usage:
    store = FileRowStore("/path/to/data")
    handle = store.create_sheet("Products", ["id", "name"])
    store.append_row(handle, ["1", "Widget"])

Directory structure:
    data_dir/
        workbook.json
        sheets/
            Products.json
            Variants.json
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Sequence

from sheet_gateway.domain.entities.dataset import CollectionHandle
from sheet_gateway.ports.outbound.row_store import RowOutOfRangeError, SheetNotFoundError


class FileRowStore:
    """File-based implementation of RowStore.

    Every mutation rewrites the sheet document through a temp file and an
    atomic rename, so a reader never sees a half-written sheet. Mutations
    from other processes are not coordinated.

    Attributes:
        data_dir: Root directory for all storage
    """

    MANIFEST = "workbook.json"

    def __init__(self, data_dir: str | Path) -> None:
        """Initialize file storage.

        Args:
            data_dir: Root directory for storage
        """
        self._data_dir = Path(data_dir)
        self._sheets_dir = self._data_dir / "sheets"
        self._sheets_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()

    @property
    def data_dir(self) -> Path:
        """Root data directory."""
        return self._data_dir

    def _sheet_path(self, name: str) -> Path:
        # Sanitize name to be filesystem-safe
        safe = name.replace("/", "_").replace("\\", "_")
        return self._sheets_dir / f"{safe}.json"

    def _write_json(self, path: Path, document: Any) -> None:
        fd, tmp = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(document, fh, ensure_ascii=False)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def _read_manifest(self) -> list[str]:
        path = self._data_dir / self.MANIFEST
        if not path.exists():
            return []
        return list(json.loads(path.read_text(encoding="utf-8")).get("sheets", []))

    def _load(self, handle: CollectionHandle) -> list[list[Any]]:
        path = self._sheet_path(handle.name)
        if not path.exists():
            raise SheetNotFoundError(f"Sheet not found: {handle.name}")
        return json.loads(path.read_text(encoding="utf-8"))["values"]

    def _save(self, handle: CollectionHandle, grid: list[list[Any]]) -> None:
        self._write_json(self._sheet_path(handle.name), {"name": handle.name, "values": grid})

    def get_sheet(self, name: str) -> CollectionHandle | None:
        return CollectionHandle(name) if self._sheet_path(name).exists() else None

    def create_sheet(self, name: str, headers: Sequence[str]) -> CollectionHandle:
        with self._lock:
            handle = CollectionHandle(name)
            if self._sheet_path(name).exists():
                return handle
            self._save(handle, [list(headers)])
            names = self._read_manifest()
            if name not in names:
                names.append(name)
                self._write_json(self._data_dir / self.MANIFEST, {"sheets": names})
            return handle

    def read_values(self, handle: CollectionHandle) -> list[list[Any]]:
        with self._lock:
            return self._load(handle)

    def append_row(self, handle: CollectionHandle, values: Sequence[Any]) -> None:
        with self._lock:
            grid = self._load(handle)
            grid.append(list(values))
            self._save(handle, grid)

    def set_value(self, handle: CollectionHandle, row: int, column: int, value: Any) -> None:
        with self._lock:
            grid = self._load(handle)
            if row < 0 or row >= len(grid) or column < 0:
                raise RowOutOfRangeError(f"Cell ({row}, {column}) out of range in {handle.name}")
            cells = grid[row]
            if column >= len(cells):
                cells.extend([""] * (column + 1 - len(cells)))
            cells[column] = value
            self._save(handle, grid)

    def delete_row(self, handle: CollectionHandle, row: int) -> None:
        with self._lock:
            grid = self._load(handle)
            if row < 0 or row >= len(grid):
                raise RowOutOfRangeError(f"Row {row} out of range in {handle.name}")
            del grid[row]
            self._save(handle, grid)

    def sheet_names(self) -> list[str]:
        with self._lock:
            return [n for n in self._read_manifest() if self._sheet_path(n).exists()]

    def __len__(self) -> int:
        """Number of sheets."""
        return len(self.sheet_names())
