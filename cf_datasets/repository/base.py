from abc import ABC, abstractmethod
from typing import Any

from cf_datasets.dataset import DaoDataset
from cf_datasets.model import DatasetDescriptor


class Repository(ABC):
    """Dataset lifecycle by logical name"""

    @abstractmethod
    def create(
        self,
        name: str,
        descriptor: DatasetDescriptor,
        element_type: type | None = None,
    ) -> DaoDataset[Any]: ...

    @abstractmethod
    def update(
        self,
        name: str,
        descriptor: DatasetDescriptor,
        element_type: type | None = None,
    ) -> DaoDataset[Any]: ...

    @abstractmethod
    def load(self, name: str, element_type: type | None = None) -> DaoDataset[Any]: ...

    @abstractmethod
    def delete(self, name: str) -> bool: ...

    @abstractmethod
    def exists(self, name: str) -> bool: ...

    @abstractmethod
    def list(self) -> list[str]: ...

    @property
    @abstractmethod
    def uri(self) -> str: ...

    def get_uri(self) -> str:
        return self.uri
