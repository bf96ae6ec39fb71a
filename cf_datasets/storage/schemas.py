"""SchemaRegistry - versioned descriptor storage with compatibility checks."""

from anystore.logging import get_logger
from anystore.store import BaseStore

from cf_datasets.core import addressing
from cf_datasets.core.conventions import path
from cf_datasets.exceptions import (
    AlreadyExists,
    IncompatibleSchema,
    InvalidArgument,
    NotFound,
)
from cf_datasets.model import DatasetDescriptor
from cf_datasets.storage.locks import get_lock

log = get_logger(__name__)


def normalize(name: str, descriptor: DatasetDescriptor) -> DatasetDescriptor:
    """
    Validate a descriptor and fill in defaults. Returns a copy, the given
    descriptor is never changed.

    - a schema needs at least one field
    - without `key_fields` the first schema field becomes the row key

    Raises:
        InvalidArgument: If the descriptor can't be stored
    """
    if not descriptor.record_schema.fields:
        raise InvalidArgument("Schema has no fields", "normalize", name)
    if descriptor.key_fields:
        return descriptor.model_copy()
    key = descriptor.record_schema.fields[0].name
    return descriptor.model_copy(update={"key_fields": (key,)})


def check_compatible(
    name: str, old: DatasetDescriptor, new: DatasetDescriptor
) -> None:
    """
    Check that records written with `old` can still be read with `new`:

    - the schema identity and key fields don't change
    - existing fields keep their type
    - added fields are nullable or have a default

    Raises:
        IncompatibleSchema: With the first violated rule
    """

    def fail(reason: str) -> None:
        raise IncompatibleSchema(reason, "update", name)

    if old.schema_name != new.schema_name:
        fail(f"Schema name changed: `{old.schema_name}` -> `{new.schema_name}`")
    if old.key_fields != new.key_fields:
        fail(f"Key fields changed: {old.key_fields} -> {new.key_fields}")
    if old.format != new.format:
        fail(f"Format changed: `{old.format}` -> `{new.format}`")
    for field in new.record_schema.fields:
        existing = old.record_schema.get_field(field.name)
        if existing is None:
            if not field.optional:
                fail(f"Added field `{field.name}` needs a default or must be nullable")
        elif existing.type != field.type:
            fail(f"Field `{field.name}` changed type: {existing.type} -> {field.type}")


class SchemaRegistry:
    """
    Registry of dataset descriptors, one versioned history per
    (table, entity) pair.

    Layout: schemas/{table}/{entity}/v{version}.json

    Registration is serialized: concurrent `create` calls for the same name
    result in exactly one success, the others raise `AlreadyExists`. This holds
    for all registries on the same store within one process.
    """

    def __init__(self, store: BaseStore) -> None:
        self._store = store
        self._lock = get_lock(str(store.uri), path.SCHEMAS)

    def _split(self, name: str, operation: str) -> tuple[str, str]:
        addressing.ensure_name(name, operation)
        if addressing.is_composite(name):
            raise InvalidArgument(
                "Composite names can't be registered", operation, name
            )
        return addressing.get_table_name(name), addressing.get_entity_name(name)

    def _versions(self, table: str, entity: str) -> list[int]:
        prefix = path.schema_prefix(table, entity)
        versions = [
            path.parse_version(key)
            for key in self._store.iterate_keys(prefix=prefix)
            if key.rsplit("/", 1)[0] == prefix
        ]
        return sorted(versions)

    def _get(self, table: str, entity: str, version: int) -> DatasetDescriptor:
        data = self._store.get(path.schema_version(table, entity, version))
        return DatasetDescriptor.model_validate_json(data)

    def _put(
        self, table: str, entity: str, version: int, descriptor: DatasetDescriptor
    ) -> None:
        key = path.schema_version(table, entity, version)
        self._store.put(key, descriptor.model_dump_json(by_alias=True).encode())
        log.info(
            "Stored schema",
            table=table,
            entity=entity,
            version=version,
            schema=descriptor.schema_name,
        )

    def create(self, name: str, descriptor: DatasetDescriptor) -> DatasetDescriptor:
        """
        Register the first version of a descriptor

        Returns:
            The normalized descriptor

        Raises:
            AlreadyExists: If a schema is registered under this name
        """
        table, entity = self._split(name, "create")
        descriptor = normalize(name, descriptor)
        with self._lock:
            if self._versions(table, entity):
                raise AlreadyExists("Dataset already exists", "create", name)
            self._put(table, entity, 1, descriptor)
        return descriptor

    def update(self, name: str, descriptor: DatasetDescriptor) -> DatasetDescriptor:
        """
        Register a new version of an existing descriptor

        Returns:
            The normalized descriptor

        Raises:
            NotFound: If nothing is registered under this name
            IncompatibleSchema: If the new version can't read existing data
        """
        table, entity = self._split(name, "update")
        descriptor = normalize(name, descriptor)
        with self._lock:
            versions = self._versions(table, entity)
            if not versions:
                raise NotFound("Dataset does not exist", "update", name)
            current = self._get(table, entity, versions[-1])
            check_compatible(name, current, descriptor)
            self._put(table, entity, versions[-1] + 1, descriptor)
        return descriptor

    def load(self, name: str, version: int | None = None) -> DatasetDescriptor:
        """
        Load the latest (or the given) version of a descriptor

        Raises:
            NotFound: If nothing is registered under this name (and version)
        """
        table, entity = self._split(name, "load")
        versions = self._versions(table, entity)
        if not versions:
            raise NotFound("No schema registered", "load", name)
        if version is None:
            version = versions[-1]
        elif version not in versions:
            raise NotFound(f"No schema version `{version}`", "load", name)
        return self._get(table, entity, version)

    def versions(self, name: str) -> list[int]:
        table, entity = self._split(name, "versions")
        return self._versions(table, entity)

    def delete(self, name: str) -> bool:
        """
        Delete all versions. Returns `False` if nothing was registered, which
        is always the case for composite names.
        """
        addressing.ensure_name(name, "delete")
        if addressing.is_composite(name):
            return False
        table, entity = self._split(name, "delete")
        with self._lock:
            versions = self._versions(table, entity)
            for version in versions:
                self._store.delete(path.schema_version(table, entity, version))
        if versions:
            log.info("Deleted schema", table=table, entity=entity)
        return bool(versions)

    def exists(self, name: str) -> bool:
        """
        Check if a schema is registered. A composite name exists if all of
        its sub-entities exist.
        """
        addressing.ensure_name(name, "exists")
        table = addressing.get_table_name(name)
        return all(
            self._versions(table, entity)
            for entity in addressing.get_sub_entity_names(name)
        )
