from pathlib import Path

import pytest

from cf_datasets.dao.types import TypeRegistry
from cf_datasets.repo import get_repository
from cf_datasets.repository import DatasetRepository, RepositoryBuilder
from cf_datasets.storage.pool import TablePool
from tests.shared import Profile

FIXTURES_PATH = (Path(__file__).parent / "fixtures").absolute()


@pytest.fixture(scope="session")
def fixtures_path() -> Path:
    return FIXTURES_PATH


@pytest.fixture(scope="function")
def tmp_pool(tmp_path) -> TablePool:
    return TablePool(tmp_path)


@pytest.fixture(scope="function")
def types() -> TypeRegistry:
    return TypeRegistry({"com.example.Profile": Profile})


@pytest.fixture(scope="function")
def tmp_repository(tmp_path) -> DatasetRepository:
    return RepositoryBuilder().storage(tmp_path).build()


@pytest.fixture(scope="function")
def tmp_specific_repository(tmp_path, types) -> DatasetRepository:
    return RepositoryBuilder().storage(tmp_path).types(types).build()


@pytest.fixture(autouse=True, scope="function")
def cache_clear():
    get_repository.cache_clear()
    yield
