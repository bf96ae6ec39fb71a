"""DatasetRepository - dataset lifecycle on a column-family store."""

from typing import Any, Self

from anystore.logging import get_logger
from anystore.types import Uri

from cf_datasets.core import addressing
from cf_datasets.core.settings import Settings
from cf_datasets.dao.factory import DaoFactory
from cf_datasets.dao.types import TypeRegistry
from cf_datasets.dataset import DaoDataset
from cf_datasets.exceptions import (
    ConnectionFailure,
    InvalidArgument,
    TypeResolutionFailure,
    Unsupported,
)
from cf_datasets.model import DatasetDescriptor
from cf_datasets.repository.base import Repository
from cf_datasets.repository.composite import CompositeAssembler
from cf_datasets.storage.pool import TablePool
from cf_datasets.storage.schemas import SchemaRegistry

log = get_logger(__name__)


class DatasetRepository(Repository):
    """
    Map logical dataset names onto tables and entities of a column-family
    store.

    A name `table.entity` addresses one entity (column family) of a table,
    `table` alone the entity named like the table, and `table.a.b` a composite
    dataset of the entities `a` and `b` sharing rows.

    Example:
        ```python
        repo = (
            RepositoryBuilder()
            .coordination_endpoint("zk1")
            .coordination_port(2181)
            .build()
        )
        users = repo.create("users.profile", descriptor)
        users.put({"name": "alice", "age": 42})
        repo.load("users.profile").get("alice")
        ```
    """

    def __init__(
        self, pool: TablePool, uri: str, types: TypeRegistry | None = None
    ) -> None:
        self.pool = pool
        self.types = types if types is not None else TypeRegistry()
        self.registry = SchemaRegistry(pool.store)
        self.factory = DaoFactory(pool, self.types)
        self.assembler = CompositeAssembler(self.registry, self.factory)
        self._uri = uri

    @property
    def uri(self) -> str:
        return self._uri

    def _check(
        self, operation: str, name: str, descriptor: DatasetDescriptor | None
    ) -> None:
        addressing.ensure_name(name, operation)
        if descriptor is None:
            raise InvalidArgument("Descriptor cannot be empty", operation, name)
        # fail on malformed schema identities before anything is registered
        try:
            self.types.resolve(descriptor)
        except TypeResolutionFailure as e:
            raise TypeResolutionFailure(e.message, operation, name) from e

    def create(
        self,
        name: str,
        descriptor: DatasetDescriptor,
        element_type: type | None = None,
    ) -> DaoDataset[Any]:
        """
        Register a new dataset

        Raises:
            InvalidArgument: Empty name or descriptor, or a composite name
            AlreadyExists: If the name is taken
            TypeResolutionFailure: Malformed schema identity
        """
        self._check("create", name, descriptor)
        descriptor = self.registry.create(name, descriptor)
        log.info("Created dataset", dataset=name, schema=descriptor.schema_name)
        return self._new_dataset(name, descriptor, element_type)

    def update(
        self,
        name: str,
        descriptor: DatasetDescriptor,
        element_type: type | None = None,
    ) -> DaoDataset[Any]:
        """
        Register a new descriptor version for an existing dataset

        Raises:
            InvalidArgument: Empty name or descriptor, or a composite name
            NotFound: If the dataset doesn't exist
            IncompatibleSchema: If the registry rejects the new descriptor
        """
        self._check("update", name, descriptor)
        descriptor = self.registry.update(name, descriptor)
        log.info("Updated dataset", dataset=name, schema=descriptor.schema_name)
        return self._new_dataset(name, descriptor, element_type)

    def load(self, name: str, element_type: type | None = None) -> DaoDataset[Any]:
        """
        Load a single or composite dataset

        Raises:
            NotFound: If the dataset (or any sub-entity of a composite) is
                not registered
        """
        addressing.ensure_name(name, "load")
        if addressing.is_composite(name):
            return self._new_composite_dataset(name, element_type)
        descriptor = self.registry.load(name)
        return self._new_dataset(name, descriptor, element_type)

    def delete(self, name: str) -> bool:
        addressing.ensure_name(name, "delete")
        return self.registry.delete(name)

    def exists(self, name: str) -> bool:
        addressing.ensure_name(name, "exists")
        return self.registry.exists(name)

    def list(self):
        """Listing datasets is not supported by this repository"""
        raise Unsupported("Listing datasets is not supported", "list")

    def _new_dataset(
        self, name: str, descriptor: DatasetDescriptor, element_type: type | None
    ) -> DaoDataset[Any]:
        dao = self.factory.make(
            addressing.get_table_name(name),
            addressing.get_entity_name(name),
            descriptor,
        )
        uri = addressing.make_dataset_uri(self.uri, name)
        return DaoDataset(name, dao, descriptor, uri, element_type)

    def _new_composite_dataset(
        self, name: str, element_type: type | None
    ) -> DaoDataset[Any]:
        dao = self.assembler.assemble(name)
        uri = addressing.make_dataset_uri(self.uri, name)
        # the first sub-entity represents the composite
        return DaoDataset(name, dao, dao.descriptors[0], uri, element_type)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.uri})>"


class RepositoryBuilder:
    """
    Build a `DatasetRepository`. Values not set explicitly are taken from
    `Settings` (env vars `CF_DATASETS_*`).
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self._endpoint = self.settings.coordination_endpoint
        self._port = self.settings.coordination_port
        self._uri: Uri = self.settings.uri
        self._types: TypeRegistry | None = None

    def coordination_endpoint(self, host: str) -> Self:
        self._endpoint = host
        return self

    def coordination_port(self, port: int) -> Self:
        self._port = port
        return self

    def storage(self, uri: Uri) -> Self:
        """Set the backing store uri"""
        self._uri = uri
        return self

    def types(self, types: TypeRegistry) -> Self:
        self._types = types
        return self

    def build(self) -> DatasetRepository:
        """
        Raises:
            ConnectionFailure: If the coordination endpoint or port is missing
                or the backing store is not reachable
        """
        if not self._endpoint:
            raise ConnectionFailure("Coordination endpoint is not set", "build")
        if not self._port:
            raise ConnectionFailure("Coordination port is not set", "build")
        pool = TablePool(self._uri)
        pool.ping()
        uri = addressing.make_repository_uri(
            self.settings.store_kind, self._endpoint, self._port
        )
        log.info("Built repository", uri=uri, storage=str(self._uri))
        return DatasetRepository(pool, uri, self._types)
