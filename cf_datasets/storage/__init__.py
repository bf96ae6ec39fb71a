"""Single-purpose storage interfaces over one backing anystore."""

from cf_datasets.storage.pool import TablePool
from cf_datasets.storage.schemas import SchemaRegistry
from cf_datasets.storage.table import Row, TableStore

__all__ = ["Row", "SchemaRegistry", "TablePool", "TableStore"]
