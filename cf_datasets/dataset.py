"""Dataset handles returned by the repository."""

from typing import Any, Generator, Generic, TypeVar

from pydantic import BaseModel

from cf_datasets.dao.base import Dao
from cf_datasets.model import DatasetDescriptor

E = TypeVar("E")


class DaoDataset(Generic[E]):
    """
    A thin view on a dataset: a name, its access object, descriptor and uri.
    Handles don't hold state of their own and can be shared between callers.

    Records are returned as `element_type` if given (a pydantic model or
    `dict`), otherwise in the native representation of the dao.
    """

    def __init__(
        self,
        name: str,
        dao: Dao,
        descriptor: DatasetDescriptor,
        uri: str,
        element_type: type[E] | None = None,
    ) -> None:
        self.name = name
        self.dao = dao
        self.descriptor = descriptor
        self.uri = uri
        self.element_type = element_type

    def _coerce(self, record: Any) -> E:
        if self.element_type is None or isinstance(record, self.element_type):
            return record
        if self.element_type is dict and isinstance(record, BaseModel):
            return record.model_dump(by_alias=True)  # type: ignore[return-value]
        if isinstance(self.element_type, type) and issubclass(
            self.element_type, BaseModel
        ):
            if isinstance(record, BaseModel):
                record = record.model_dump(by_alias=True)
            return self.element_type.model_validate(record)  # type: ignore
        return record

    def get(self, key: Any) -> E | None:
        record = self.dao.get(key)
        if record is None:
            return None
        return self._coerce(record)

    def put(self, record: E) -> str:
        """Write a record, returns its row key"""
        return self.dao.put(record)

    def delete(self, key: Any) -> bool:
        return self.dao.delete(key)

    def exists(self, key: Any) -> bool:
        return self.dao.exists(key)

    def scan(
        self, start: Any | None = None, stop: Any | None = None
    ) -> Generator[E, None, None]:
        for record in self.dao.scan(start, stop):
            yield self._coerce(record)

    def __iter__(self) -> Generator[E, None, None]:
        yield from self.scan()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.uri})>"
