"""Dataset descriptor models."""

from functools import lru_cache
from typing import Any, Literal, Self, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, create_model, model_validator

FieldType: TypeAlias = Literal[
    "string", "int", "long", "float", "double", "boolean", "bytes", "array", "map"
]

Format: TypeAlias = Literal["json"]

PYTHON_TYPES: dict[str, Any] = {
    "string": str,
    "int": int,
    "long": int,
    "float": float,
    "double": float,
    "boolean": bool,
    "bytes": bytes,
    "array": list[Any],
    "map": dict[str, Any],
}


class FieldModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: FieldType = "string"
    nullable: bool = False
    default: Any = None
    doc: str | None = None

    @property
    def optional(self) -> bool:
        """Field can be omitted from a record"""
        return self.nullable or self.default is not None


class SchemaModel(BaseModel):
    """A record schema, identified by its fully qualified `name`"""

    model_config = ConfigDict(frozen=True)

    name: str
    """Fully qualified name, e.g. `com.example.User`"""
    fields: tuple[FieldModel, ...] = ()
    doc: str | None = None

    @property
    def namespace(self) -> str | None:
        if "." in self.name:
            return self.name.rsplit(".", 1)[0]

    @property
    def short_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> FieldModel | None:
        for field in self.fields:
            if field.name == name:
                return field

    @property
    def record_model(self) -> type[BaseModel]:
        """A pydantic model built from this schema, used to validate generic
        (dict) records. Schema field names are the aliases of the model
        fields, dump with `by_alias=True`."""
        return _make_record_model(self.model_dump_json())


class DatasetDescriptor(BaseModel):
    """
    Describes a dataset: its record schema, the cell format and the
    partition strategy (`key_fields`, forming the row key in this order).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    record_schema: SchemaModel = Field(alias="schema")
    format: Format = "json"
    key_fields: tuple[str, ...] = ()
    properties: dict[str, str] = {}

    @property
    def schema_name(self) -> str:
        """The schema identity"""
        return self.record_schema.name

    @model_validator(mode="after")
    def check_key_fields(self) -> Self:
        names = self.record_schema.field_names
        for key in self.key_fields:
            if key not in names:
                raise ValueError(f"Key field `{key}` not in schema fields: {names}")
        return self

    def dump(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


@lru_cache(maxsize=512)
def _make_record_model(schema: str) -> type[BaseModel]:
    record_schema = SchemaModel.model_validate_json(schema)
    fields: dict[str, Any] = {}
    # field names like `_rev` or `schema` can't be model attributes
    for ix, field in enumerate(record_schema.fields):
        python_type = PYTHON_TYPES[field.type]
        if field.nullable:
            python_type = python_type | None
            info = Field(field.default, alias=field.name)
        elif field.default is not None:
            info = Field(field.default, alias=field.name)
        else:
            info = Field(..., alias=field.name)
        fields[f"field_{ix}"] = (python_type, info)
    return create_model(record_schema.short_name, **fields)
