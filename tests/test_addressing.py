import pytest

from cf_datasets.core import addressing
from cf_datasets.core.conventions import path
from cf_datasets.exceptions import InvalidArgument


def test_addressing_names():
    assert addressing.get_table_name("users") == "users"
    assert addressing.get_entity_name("users") == "users"
    assert addressing.get_table_name("users.profile") == "users"
    assert addressing.get_entity_name("users.profile") == "profile"
    assert addressing.get_table_name("users.profile.settings") == "users"
    assert addressing.get_entity_name("users.profile.settings") == "profile.settings"

    assert not addressing.is_composite("users")
    assert not addressing.is_composite("users.profile")
    assert addressing.is_composite("users.profile.settings")
    assert addressing.get_sub_entity_names("users.b.a") == ["b", "a"]
    assert addressing.make_name("users", "profile") == "users.profile"


def test_addressing_ensure_name():
    assert addressing.ensure_name("users.profile") == "users.profile"
    for name in (None, "", "users..profile", "users.", ".profile", "a/b"):
        with pytest.raises(InvalidArgument):
            addressing.ensure_name(name, "load")

    with pytest.raises(InvalidArgument) as e:
        addressing.ensure_name("", "create")
    assert e.value.operation == "create"
    assert "operation=`create`" in str(e.value)


def test_addressing_uris():
    uri = addressing.make_repository_uri("hbase", "zk1", 2181)
    assert uri == "repo:hbase:zk1:2181"
    assert (
        addressing.make_dataset_uri(uri, "users.profile")
        == "dataset:hbase:zk1:2181/users.profile"
    )
    with pytest.raises(InvalidArgument):
        addressing.make_dataset_uri("hbase:zk1:2181", "users")


def test_conventions_path():
    key = path.schema_version("users", "profile", 2)
    assert key == "schemas/users/profile/v000002.json"
    assert path.parse_version("schemas/users/profile/v000002.json") == 2
    key = path.row("users", "alice/1:x")
    assert key == "tables/users/YWxpY2UvMTp4.json"
    assert path.row_key(key) == "alice/1:x"
