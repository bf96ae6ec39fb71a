import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from pydantic import BaseModel

from cf_datasets.dao.composite import CompositeDao
from cf_datasets.dao.entity import GenericDao, SpecificDao
from cf_datasets.dataset import DaoDataset
from cf_datasets.exceptions import (
    AlreadyExists,
    IncompatibleSchema,
    InvalidArgument,
    NotFound,
    TypeResolutionFailure,
    Unsupported,
)
from cf_datasets.model import DatasetDescriptor
from cf_datasets.repository import Repository, RepositoryBuilder
from tests.shared import EVENT, PROFILE, SETTINGS, Profile, Settings


def test_repository_create_load(tmp_repository):
    assert isinstance(tmp_repository, Repository)
    data = PROFILE.dump()
    data["key_fields"] = []
    raw = DatasetDescriptor.model_validate(data)

    dataset = tmp_repository.create("users.profile", raw)
    assert isinstance(dataset, DaoDataset)
    assert dataset.name == "users.profile"
    assert dataset.uri == "dataset:hbase:localhost:2181/users.profile"
    # handle is built over the normalized descriptor
    assert dataset.descriptor.key_fields == ("user",)
    assert raw.key_fields == ()

    loaded = tmp_repository.load("users.profile")
    assert loaded.descriptor == dataset.descriptor
    assert loaded.descriptor.schema_name == raw.schema_name
    assert isinstance(loaded.dao, GenericDao)

    with pytest.raises(AlreadyExists):
        tmp_repository.create("users.profile", SETTINGS)
    loaded = tmp_repository.load("users.profile")
    assert loaded.descriptor.schema_name == PROFILE.schema_name

    with pytest.raises(NotFound):
        tmp_repository.load("users.missing")


def test_repository_invalid_arguments(tmp_repository):
    for name in (None, "", "users..profile"):
        with pytest.raises(InvalidArgument):
            tmp_repository.create(name, PROFILE)
        with pytest.raises(InvalidArgument):
            tmp_repository.update(name, PROFILE)
        with pytest.raises(InvalidArgument):
            tmp_repository.load(name)
        with pytest.raises(InvalidArgument):
            tmp_repository.delete(name)
        with pytest.raises(InvalidArgument):
            tmp_repository.exists(name)
    with pytest.raises(InvalidArgument):
        tmp_repository.create("users.profile", None)
    with pytest.raises(InvalidArgument):
        tmp_repository.create("users.profile.settings", PROFILE)


def test_repository_type_resolution(tmp_repository, tmp_specific_repository):
    dataset = tmp_specific_repository.create("users.profile", PROFILE)
    assert isinstance(dataset.dao, SpecificDao)
    dataset.put(Profile(user="alice", age=42))
    assert tmp_specific_repository.load("users.profile").get("alice") == Profile(
        user="alice", age=42
    )

    # same store without a registered model: generic, every time
    for _ in range(3):
        dataset = tmp_repository.load("users.profile")
        assert isinstance(dataset.dao, GenericDao)
        assert dataset.get("alice") == {"user": "alice", "age": 42}

    data = PROFILE.dump()
    data["schema"]["name"] = "com.example.Bad Name"
    bad = DatasetDescriptor.model_validate(data)
    with pytest.raises(TypeResolutionFailure) as e:
        tmp_repository.create("users.bad", bad)
    assert e.value.operation == "create"
    assert e.value.name == "users.bad"
    assert not tmp_repository.exists("users.bad")
    tmp_repository.create("users.bad", PROFILE)
    with pytest.raises(TypeResolutionFailure) as e:
        tmp_repository.update("users.bad", bad)
    assert e.value.operation == "update"
    assert e.value.name == "users.bad"
    assert tmp_repository.load("users.bad").descriptor == PROFILE


def test_repository_element_type(tmp_repository, tmp_specific_repository):
    tmp_repository.create("users.profile", PROFILE).put({"user": "alice", "age": 1})

    dataset = tmp_repository.load("users.profile", Profile)
    assert dataset.element_type is Profile
    assert dataset.get("alice") == Profile(user="alice", age=1)
    assert list(dataset) == [Profile(user="alice", age=1)]

    dataset = tmp_specific_repository.load("users.profile", dict)
    assert dataset.get("alice") == {"user": "alice", "age": 1}


def test_repository_update(tmp_repository):
    with pytest.raises(NotFound):
        tmp_repository.update("users.profile", PROFILE)

    tmp_repository.create("users.profile", PROFILE).put({"user": "alice"})
    data = PROFILE.dump()
    data["schema"]["fields"].append({"name": "city", "default": "unknown"})
    descriptor = DatasetDescriptor.model_validate(data)
    dataset = tmp_repository.update("users.profile", descriptor)
    assert dataset.descriptor.record_schema.field_names == ["user", "age", "city"]
    # existing rows are read with the new descriptor
    assert dataset.get("alice") == {"user": "alice", "age": None, "city": "unknown"}

    data["schema"]["fields"].append({"name": "zip", "type": "int"})
    with pytest.raises(IncompatibleSchema):
        tmp_repository.update("users.profile", DatasetDescriptor.model_validate(data))


def test_repository_delete_exists(tmp_repository):
    assert tmp_repository.delete("users.profile") is False
    assert tmp_repository.exists("users.profile") is False

    tmp_repository.create("users.profile", PROFILE)
    assert tmp_repository.exists("users.profile") is True
    assert tmp_repository.delete("users.profile") is True
    assert tmp_repository.exists("users.profile") is False
    assert tmp_repository.delete("users.profile") is False
    with pytest.raises(NotFound):
        tmp_repository.load("users.profile")


def test_repository_list_uri(tmp_repository):
    with pytest.raises(Unsupported):
        tmp_repository.list()
    tmp_repository.create("users.profile", PROFILE)
    with pytest.raises(Unsupported):
        tmp_repository.list()
    with pytest.raises(NotImplementedError):
        tmp_repository.list()

    assert tmp_repository.uri == "repo:hbase:localhost:2181"
    assert tmp_repository.get_uri() == tmp_repository.uri


def test_repository_composite(tmp_repository):
    tmp_repository.create("users.profile", PROFILE)
    with pytest.raises(NotFound):
        tmp_repository.load("users.profile.settings")
    assert not tmp_repository.exists("users.profile.settings")

    tmp_repository.create("users.settings", SETTINGS)
    assert tmp_repository.exists("users.profile.settings")
    assert tmp_repository.load("users.profile").descriptor == PROFILE
    assert tmp_repository.load("users.settings").descriptor == SETTINGS

    dataset = tmp_repository.load("users.profile.settings")
    assert dataset.uri == "dataset:hbase:localhost:2181/users.profile.settings"
    assert isinstance(dataset.dao, CompositeDao)
    assert dataset.dao.entities == ["profile", "settings"]
    # first sub-entity represents the composite
    assert dataset.descriptor == PROFILE
    assert dataset.dao.descriptors == [PROFILE, SETTINGS]

    reverse = tmp_repository.load("users.settings.profile")
    assert reverse.dao.entities == ["settings", "profile"]
    assert reverse.descriptor == SETTINGS

    dataset.put({"profile": {"user": "alice", "age": 3}, "settings": {"user": "alice"}})
    profile = tmp_repository.load("users.profile").get("alice")
    assert profile == {"user": "alice", "age": 3}
    assert tmp_repository.load("users.settings").get("alice")["theme"] == "light"

    # composites are never registered themselves
    assert tmp_repository.delete("users.profile.settings") is False
    assert tmp_repository.exists("users.profile.settings")


def test_repository_composite_specific(tmp_specific_repository):
    repo = tmp_specific_repository
    repo.create("users.profile", PROFILE)
    repo.create("users.settings", SETTINGS)
    repo.create("users.event", EVENT)

    dataset = repo.load("users.profile.settings")
    dataset.put({"profile": Profile(user="bob"), "settings": {"user": "bob"}})
    record = dataset.get("bob")
    assert record["profile"] == Profile(user="bob")
    assert record["settings"] == {"user": "bob", "theme": "light"}

    class UserView(BaseModel):
        profile: Profile | None = None
        settings: Settings | None = None

    view = repo.load("users.profile.settings", UserView).get("bob")
    assert view == UserView(profile=Profile(user="bob"), settings=Settings(user="bob"))

    # sub-entities with different keys can't share rows
    with pytest.raises(InvalidArgument):
        repo.load("users.profile.event")


def test_repository_concurrent_create(tmp_repository):
    def create(_) -> bool:
        try:
            tmp_repository.create("users.profile", PROFILE)
            return True
        except AlreadyExists:
            return False

    with ThreadPoolExecutor(8) as pool:
        results = list(pool.map(create, range(20)))
    assert results.count(True) == 1


def test_repository_concurrent_create_same_store(tmp_path):
    repos = [RepositoryBuilder().storage(tmp_path).build() for _ in range(2)]
    assert repos[0].registry._lock is repos[1].registry._lock

    for ix in range(10):
        name = f"users.profile{ix}"
        barrier = threading.Barrier(len(repos))

        def create(repo) -> bool:
            barrier.wait()
            try:
                repo.create(name, PROFILE)
                return True
            except AlreadyExists:
                return False

        with ThreadPoolExecutor(len(repos)) as pool:
            results = list(pool.map(create, repos))
        assert results.count(True) == 1
        assert repos[0].registry.versions(name) == [1]
