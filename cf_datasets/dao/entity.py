from typing import Any, Generic

from pydantic import BaseModel

from cf_datasets.dao.base import Dao, E
from cf_datasets.dao.codec import EntityCodec
from cf_datasets.model import DatasetDescriptor
from cf_datasets.storage.table import Row, TableStore


class EntityDao(Dao[E], Generic[E]):
    """Access object for a single entity in a table"""

    def __init__(self, table: TableStore, entity: str, codec: EntityCodec[E]) -> None:
        self.table = table
        self.entity = entity
        self.codec = codec

    @property
    def descriptor(self) -> DatasetDescriptor:
        return self.codec.descriptor

    @property
    def families(self) -> list[str]:
        return [self.codec.family]

    def make_key(self, key: Any) -> str:
        return self.codec.make_key(key)

    def encode(self, record: E) -> tuple[str, dict[str, dict[str, Any]]]:
        row_key, cells = self.codec.encode(record)
        return row_key, {self.codec.family: cells}

    def decode(self, row: Row) -> E | None:
        cells = row.family(self.codec.family)
        if not cells:
            return None
        return self.codec.decode(cells)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.table.name}.{self.entity})>"


class SpecificDao(EntityDao[BaseModel]):
    """Records are instances of the pydantic model registered for the schema"""

    def __init__(
        self,
        table: TableStore,
        entity: str,
        descriptor: DatasetDescriptor,
        model: type[BaseModel],
    ) -> None:
        super().__init__(table, entity, EntityCodec(entity, descriptor, model))

    @property
    def model(self) -> type[BaseModel]:
        assert self.codec.model is not None
        return self.codec.model


class GenericDao(EntityDao[dict[str, Any]]):
    """Records are plain dicts validated against the descriptor's schema"""

    def __init__(
        self, table: TableStore, entity: str, descriptor: DatasetDescriptor
    ) -> None:
        super().__init__(table, entity, EntityCodec(entity, descriptor))
