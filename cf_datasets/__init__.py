"""Dataset repository on column-family stores."""

from cf_datasets.dao.types import TypeRegistry
from cf_datasets.dataset import DaoDataset
from cf_datasets.model import DatasetDescriptor, FieldModel, SchemaModel
from cf_datasets.repo import get_repository, load_dataset
from cf_datasets.repository import DatasetRepository, RepositoryBuilder

__version__ = "0.1.0"

__all__ = [
    "DaoDataset",
    "DatasetDescriptor",
    "DatasetRepository",
    "FieldModel",
    "RepositoryBuilder",
    "SchemaModel",
    "TypeRegistry",
    "get_repository",
    "load_dataset",
]
