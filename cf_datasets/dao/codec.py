"""Encode records into column-family cells and back."""

from typing import Any, Generic, Mapping, TypeVar
from urllib.parse import quote

from pydantic import BaseModel, ValidationError

from cf_datasets.exceptions import InvalidArgument
from cf_datasets.model import DatasetDescriptor

E = TypeVar("E")

KEY_SEPARATOR = ":"


class EntityCodec(Generic[E]):
    """
    Row codec for one entity. All fields of a record are stored as cells in
    the column family named after the entity, with the field names as
    qualifiers and json compatible values. The row key is built from the
    descriptor's `key_fields`.

    With a `model`, records are instances of that pydantic model (specific
    encoding). Without, records are plain dicts validated against the
    descriptor's schema (generic encoding).
    """

    def __init__(
        self,
        entity: str,
        descriptor: DatasetDescriptor,
        model: type[BaseModel] | None = None,
    ) -> None:
        self.entity = entity
        self.descriptor = descriptor
        self.model = model

    @property
    def family(self) -> str:
        return self.entity

    @property
    def specific(self) -> bool:
        return self.model is not None

    @property
    def key_fields(self) -> tuple[str, ...]:
        return self.descriptor.key_fields

    def _validate(self, data: Any) -> BaseModel:
        model = self.model or self.descriptor.record_schema.record_model
        if isinstance(data, model):
            return data
        if isinstance(data, BaseModel):
            data = data.model_dump(by_alias=True)
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise InvalidArgument(
                f"Invalid record for `{self.descriptor.schema_name}`",
                "encode",
                self.entity,
            ) from e

    def to_dict(self, record: Any) -> dict[str, Any]:
        return self._validate(record).model_dump(mode="json", by_alias=True)

    def make_key(self, key: Any) -> str:
        """
        Build a row key from a key value: a mapping with (at least) the key
        fields, a record, a tuple of values in key field order or a single
        value for a single key field.

        Examples:
            >>> codec.make_key({"user": "alice", "n": 1})
            "alice:1"
        """
        if isinstance(key, BaseModel):
            key = key.model_dump(mode="json", by_alias=True)
        if isinstance(key, Mapping):
            try:
                values = [key[f] for f in self.key_fields]
            except KeyError as e:
                raise InvalidArgument(
                    f"Missing key field: {e}", "make_key", self.entity
                ) from e
        elif isinstance(key, (tuple, list)):
            values = list(key)
        else:
            values = [key]
        if len(values) != len(self.key_fields):
            raise InvalidArgument(
                f"Expected key values for {self.key_fields}, got {values}",
                "make_key",
                self.entity,
            )
        if any(v is None for v in values):
            raise InvalidArgument("Key values can't be empty", "make_key", self.entity)
        return KEY_SEPARATOR.join(quote(str(v), safe="") for v in values)

    def encode(self, record: Any) -> tuple[str, dict[str, Any]]:
        """
        Returns:
            row key and the cells of this entity's column family
        """
        data = self.to_dict(record)
        return self.make_key(data), data

    def decode(self, cells: dict[str, Any]) -> E:
        record = self._validate(cells)
        if self.model is None:
            return record.model_dump(by_alias=True)  # type: ignore[return-value]
        return record  # type: ignore[return-value]
