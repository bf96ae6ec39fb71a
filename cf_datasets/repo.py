"""
Public convenience functions for the dataset repository.

```python
from cf_datasets import repo

# Get the configured repository (CF_DATASETS_* settings)
repository = repo.get_repository()

# Load a dataset
users = repo.load_dataset("users.profile")
```
"""

from functools import cache
from typing import Any

from anystore.types import Uri

from cf_datasets.dao.types import TypeRegistry
from cf_datasets.dataset import DaoDataset
from cf_datasets.repository import DatasetRepository, RepositoryBuilder


@cache
def get_repository(
    uri: Uri | None = None, types: TypeRegistry | None = None
) -> DatasetRepository:
    """
    Get a dataset repository for the configured coordination endpoint. If
    `uri` is set, use this backing store instead of the configured one.

    Args:
        uri: Backing store uri (default from CF_DATASETS_URI setting)
        types: Registry of specific record models

    Returns:
        repository
    """
    builder = RepositoryBuilder()
    if uri is not None:
        builder.storage(uri)
    if types is not None:
        builder.types(types)
    return builder.build()


def load_dataset(name: str, element_type: type | None = None) -> DaoDataset[Any]:
    """
    Load a dataset from the configured repository

    Args:
        name: Logical dataset name (`table.entity` or composite `table.a.b`)
        element_type: Optional record type to return

    Returns:
        dataset
    """
    return get_repository().load(name, element_type)
