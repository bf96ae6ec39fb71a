import pytest
from pydantic import BaseModel

from cf_datasets.dao.types import TypeRegistry
from cf_datasets.exceptions import InvalidArgument, TypeResolutionFailure
from cf_datasets.model import DatasetDescriptor
from tests.shared import PROFILE, SETTINGS, Profile


def test_dao_types_resolve(types):
    assert types.resolve(PROFILE) is Profile
    assert types.resolve("com.example.Profile") is Profile
    assert types.is_specific(PROFILE)
    assert "com.example.Profile" in types
    assert len(types) == 1

    # generic fallback is not an error and stable
    assert types.resolve(SETTINGS) is None
    assert not types.is_specific(SETTINGS)
    assert all(types.resolve(SETTINGS) is None for _ in range(5))


def test_dao_types_malformed():
    types = TypeRegistry()
    for name in ("", "com..example", "com.example.", "1abc", "com/example"):
        with pytest.raises(TypeResolutionFailure):
            types.resolve(name)
        with pytest.raises(TypeResolutionFailure):
            types.register(name, Profile)

    descriptor = DatasetDescriptor.model_validate(
        {"schema": {"name": "not a name", "fields": [{"name": "id"}]}}
    )
    with pytest.raises(TypeResolutionFailure):
        types.is_specific(descriptor)


def test_dao_types_register():
    types = TypeRegistry()

    @types.register("com.example.Thing")
    class Thing(BaseModel):
        id: str

    assert types.resolve("com.example.Thing") is Thing
    types.register("com.example.Other", Profile)
    assert types.resolve("com.example.Other") is Profile

    with pytest.raises(InvalidArgument):
        types.register("com.example.Dict", dict)
