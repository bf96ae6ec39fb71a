"""Access objects for entities in column-family tables."""

from cf_datasets.dao.base import Dao
from cf_datasets.dao.codec import EntityCodec
from cf_datasets.dao.composite import CompositeDao, SubEntity
from cf_datasets.dao.entity import EntityDao, GenericDao, SpecificDao
from cf_datasets.dao.factory import DaoFactory
from cf_datasets.dao.types import TypeRegistry

__all__ = [
    "CompositeDao",
    "Dao",
    "DaoFactory",
    "EntityCodec",
    "EntityDao",
    "GenericDao",
    "SpecificDao",
    "SubEntity",
    "TypeRegistry",
]
