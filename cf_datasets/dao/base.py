from abc import ABC, abstractmethod
from functools import cached_property
from typing import Any, Generator, Generic, TypeVar

from anystore.logging import get_logger
from structlog.stdlib import BoundLogger

from cf_datasets.model import DatasetDescriptor
from cf_datasets.storage.table import Row, TableStore

E = TypeVar("E")


class Dao(ABC, Generic[E]):
    """
    Access object contract: read, write and scan records of one or more
    entities in one table.
    """

    table: TableStore

    @property
    @abstractmethod
    def descriptor(self) -> DatasetDescriptor:
        """The (representative) descriptor of the records"""
        ...

    @abstractmethod
    def make_key(self, key: Any) -> str:
        """Build the row key for a key value or record"""
        ...

    @abstractmethod
    def encode(self, record: E) -> tuple[str, dict[str, dict[str, Any]]]:
        """Get the row key and cells (family -> qualifier -> value)"""
        ...

    @abstractmethod
    def decode(self, row: Row) -> E | None:
        ...

    @property
    @abstractmethod
    def families(self) -> list[str]:
        ...

    @cached_property
    def log(self) -> BoundLogger:
        """Get a struct logger with prepopulated context"""
        name = f"cf_datasets.{self.__class__.__name__}.{self.table.name}"
        return get_logger(name, table=self.table.name, families=self.families)

    def get(self, key: Any) -> E | None:
        row = self.table.get(self.make_key(key))
        if row is None:
            return None
        return self.decode(row)

    def put(self, record: E) -> str:
        """Write a record and return its row key"""
        row_key, cells = self.encode(record)
        self.table.put(row_key, cells)
        self.log.debug("Put record", row_key=row_key)
        return row_key

    def delete(self, key: Any) -> bool:
        """Delete the record, keeping other families of the same row"""
        return self.table.delete(self.make_key(key), self.families)

    def exists(self, key: Any) -> bool:
        row = self.table.get(self.make_key(key))
        return row is not None and any(row.has_family(f) for f in self.families)

    def scan(
        self, start: Any | None = None, stop: Any | None = None
    ) -> Generator[E, None, None]:
        """
        Iterate records ordered by row key within `[start, stop)`. Row keys
        compare as strings.
        """
        start_key = self.make_key(start) if start is not None else None
        stop_key = self.make_key(stop) if stop is not None else None
        for row in self.table.scan(start_key, stop_key, self.families):
            record = self.decode(row)
            if record is not None:
                yield record
