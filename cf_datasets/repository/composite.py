from anystore.logging import get_logger

from cf_datasets.core import addressing
from cf_datasets.dao.composite import CompositeDao, SubEntity
from cf_datasets.dao.factory import DaoFactory
from cf_datasets.storage.schemas import SchemaRegistry

log = get_logger(__name__)


class CompositeAssembler:
    """
    Assemble a composite dao for a name like `table.a.b`: the entities `a`
    and `b` of `table`, stored in the same rows.
    """

    def __init__(self, registry: SchemaRegistry, factory: DaoFactory) -> None:
        self.registry = registry
        self.factory = factory

    def assemble(self, name: str) -> CompositeDao:
        """
        Load the descriptor of every sub-entity (in name order), resolve its
        type and build one composite dao over the table.

        Raises:
            NotFound: If any sub-entity is not registered
            TypeResolutionFailure: If any sub-entity has a malformed schema
                identity
        """
        table = addressing.get_table_name(name)
        parts: list[SubEntity] = []
        for entity in addressing.get_sub_entity_names(name):
            descriptor = self.registry.load(addressing.make_name(table, entity))
            model = self.factory.types.resolve(descriptor)
            parts.append(SubEntity(entity, descriptor, model))
        log.debug(
            "Assembled composite",
            table=table,
            entities=[p.entity for p in parts],
            specific=[p.model is not None for p in parts],
        )
        return self.factory.make_composite(table, parts)
