"""TableStore - rows of column families on top of an anystore backend."""

from typing import Any, Generator, Iterable, TypeAlias

from anystore.store import BaseStore
from pydantic import BaseModel

from cf_datasets.core.conventions import path
from cf_datasets.storage.locks import get_lock

Cells: TypeAlias = dict[str, dict[str, Any]]
"""Column family -> qualifier -> value"""


class Row(BaseModel):
    key: str
    cells: Cells = {}

    def family(self, name: str) -> dict[str, Any] | None:
        return self.cells.get(name)

    def has_family(self, name: str) -> bool:
        return bool(self.cells.get(name))


class TableStore:
    """
    One physical table. A row holds any number of column families, each
    family holds qualifier -> value cells.

    Layout: tables/{table}/{row_key}.json

    Writes merge cells into an existing row (put semantics of wide-column
    stores), deletes remove whole families or the whole row. Read-modify-write
    cycles are serialized per table and store within one process.
    """

    def __init__(self, name: str, store: BaseStore) -> None:
        self.name = name
        self._store = store
        self._lock = get_lock(str(store.uri), path.TABLES, name)

    def get(self, row_key: str) -> Row | None:
        data = self._store.get(path.row(self.name, row_key))
        if data is None:
            return None
        return Row.model_validate_json(data)

    def exists(self, row_key: str, family: str | None = None) -> bool:
        if family is None:
            return self._store.exists(path.row(self.name, row_key))
        row = self.get(row_key)
        return row is not None and row.has_family(family)

    def put(self, row_key: str, cells: Cells) -> Row:
        """Merge the given cells into the row and return the stored row"""
        with self._lock:
            row = self.get(row_key) or Row(key=row_key)
            merged = {k: dict(v) for k, v in row.cells.items()}
            for family, values in cells.items():
                merged.setdefault(family, {}).update(values)
            row = Row(key=row_key, cells=merged)
            key = path.row(self.name, row_key)
            self._store.put(key, row.model_dump_json().encode())
            return row

    def delete(self, row_key: str, families: Iterable[str] | None = None) -> bool:
        """
        Delete the given families of a row, or the whole row if `families` is
        omitted. The row itself is removed once it holds no families anymore.

        Returns:
            If anything was deleted
        """
        key = path.row(self.name, row_key)
        with self._lock:
            row = self.get(row_key)
            if row is None:
                return False
            if families is None:
                self._store.delete(key)
                return True
            drop = set(families)
            cells = {k: v for k, v in row.cells.items() if k not in drop}
            if cells == row.cells:
                return False
            if cells:
                row = Row(key=row_key, cells=cells)
                self._store.put(key, row.model_dump_json().encode())
            else:
                self._store.delete(key)
            return True

    def scan(
        self,
        start: str | None = None,
        stop: str | None = None,
        families: Iterable[str] | None = None,
    ) -> Generator[Row, None, None]:
        """
        Iterate rows ordered by row key within `[start, stop)`, optionally
        only rows holding at least one of `families`.
        """
        wanted = set(families) if families is not None else None
        prefix = path.table_prefix(self.name)
        keys = sorted(
            path.row_key(k)
            for k in self._store.iterate_keys(prefix=prefix)
            if k.rsplit("/", 1)[0] == prefix
        )
        for row_key in keys:
            if start is not None and row_key < start:
                continue
            if stop is not None and row_key >= stop:
                break
            row = self.get(row_key)
            if row is None:
                continue
            if wanted is not None and not any(row.has_family(f) for f in wanted):
                continue
            yield row

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.name})>"
