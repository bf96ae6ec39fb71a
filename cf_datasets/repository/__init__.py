"""Dataset repositories: lifecycle of datasets by logical name."""

from cf_datasets.repository.base import Repository
from cf_datasets.repository.composite import CompositeAssembler
from cf_datasets.repository.datasets import DatasetRepository, RepositoryBuilder

__all__ = [
    "CompositeAssembler",
    "DatasetRepository",
    "Repository",
    "RepositoryBuilder",
]
