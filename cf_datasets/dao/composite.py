from typing import Any, Mapping, NamedTuple

from pydantic import BaseModel

from cf_datasets.dao.base import Dao
from cf_datasets.dao.codec import EntityCodec
from cf_datasets.exceptions import InvalidArgument
from cf_datasets.model import DatasetDescriptor
from cf_datasets.storage.table import Row, TableStore

CompositeRecord = dict[str, Any]
"""Sub-entity name -> record (or `None` if the row has no such entity)"""


class SubEntity(NamedTuple):
    entity: str
    descriptor: DatasetDescriptor
    model: type[BaseModel] | None = None


class CompositeDao(Dao[CompositeRecord]):
    """
    Access object for several entities stored in the same physical row, each
    in its own column family. Records are dicts of sub-entity name to
    sub-record, in sub-entity order.

    All sub-entities share the same key fields. The first sub-entity's
    descriptor is the representative descriptor of the composite.
    """

    def __init__(self, table: TableStore, parts: list[SubEntity]) -> None:
        if not parts:
            raise InvalidArgument(
                "Composite needs sub-entities", "composite", table.name
            )
        self.table = table
        self.codecs = [EntityCodec(p.entity, p.descriptor, p.model) for p in parts]
        key_fields = self.codecs[0].key_fields
        for codec in self.codecs[1:]:
            if codec.key_fields != key_fields:
                raise InvalidArgument(
                    f"Sub-entity `{codec.entity}` key fields {codec.key_fields} "
                    f"differ from {key_fields}",
                    "composite",
                    table.name,
                )

    @property
    def entities(self) -> list[str]:
        return [c.entity for c in self.codecs]

    @property
    def descriptors(self) -> list[DatasetDescriptor]:
        return [c.descriptor for c in self.codecs]

    @property
    def descriptor(self) -> DatasetDescriptor:
        return self.codecs[0].descriptor

    @property
    def families(self) -> list[str]:
        return [c.family for c in self.codecs]

    def make_key(self, key: Any) -> str:
        return self.codecs[0].make_key(key)

    def encode(
        self, record: Mapping[str, Any]
    ) -> tuple[str, dict[str, dict[str, Any]]]:
        unknown = set(record) - set(self.entities)
        if unknown:
            raise InvalidArgument(
                f"Unknown sub-entities: {sorted(unknown)}", "encode", self.table.name
            )
        row_key: str | None = None
        cells: dict[str, dict[str, Any]] = {}
        for codec in self.codecs:
            sub = record.get(codec.entity)
            if sub is None:
                continue
            key, values = codec.encode(sub)
            if row_key is not None and key != row_key:
                raise InvalidArgument(
                    f"Sub-entity `{codec.entity}` has key `{key}`, "
                    f"expected `{row_key}`",
                    "encode",
                    self.table.name,
                )
            row_key = key
            cells[codec.family] = values
        if row_key is None:
            raise InvalidArgument("Empty composite record", "encode", self.table.name)
        return row_key, cells

    def decode(self, row: Row) -> CompositeRecord | None:
        record: CompositeRecord = {}
        for codec in self.codecs:
            cells = row.family(codec.family)
            record[codec.entity] = codec.decode(cells) if cells else None
        if all(v is None for v in record.values()):
            return None
        return record

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.table.name}: {self.entities})>"
