from anystore.logging import get_logger

from cf_datasets.dao.composite import CompositeDao, SubEntity
from cf_datasets.dao.entity import EntityDao, GenericDao, SpecificDao
from cf_datasets.dao.types import TypeRegistry
from cf_datasets.model import DatasetDescriptor
from cf_datasets.storage.pool import TablePool

log = get_logger(__name__)


class DaoFactory:
    """Build access objects on tables of a shared pool"""

    def __init__(self, pool: TablePool, types: TypeRegistry) -> None:
        self.pool = pool
        self.types = types

    def make(self, table: str, entity: str, descriptor: DatasetDescriptor) -> EntityDao:
        """
        Build a `SpecificDao` if a model is registered for the descriptor's
        schema, else a `GenericDao`.
        """
        model = self.types.resolve(descriptor)
        if model is not None:
            log.debug(
                "Specific dao", table=table, entity=entity, model=model.__name__
            )
            return SpecificDao(self.pool.get_table(table), entity, descriptor, model)
        log.debug("Generic dao", table=table, entity=entity)
        return GenericDao(self.pool.get_table(table), entity, descriptor)

    def make_composite(self, table: str, parts: list[SubEntity]) -> CompositeDao:
        return CompositeDao(self.pool.get_table(table), parts)
