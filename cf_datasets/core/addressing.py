"""
Naming conventions: derive physical table and entity identifiers from a
logical dataset name and build canonical repository and dataset uris.

A logical name is `table`, `table.entity` or, for composite datasets,
`table.entity_a.entity_b`. Everything before the first dot is the table,
everything after it is the entity name. A name without a dot names the
entity that is equal to the table.
"""

from cf_datasets.exceptions import InvalidArgument

SEPARATOR = "."

REPOSITORY_SCHEME = "repo"
DATASET_SCHEME = "dataset"


def ensure_name(name: str | None, operation: str | None = None) -> str:
    """
    Validate a logical dataset name

    Raises:
        InvalidArgument: If the name is empty, contains a `/` or has empty
            dot-separated parts
    """
    if not name:
        raise InvalidArgument("Dataset name cannot be empty", operation, name)
    if not isinstance(name, str):
        raise InvalidArgument(f"Invalid dataset name: `{name!r}`", operation)
    if "/" in name:
        raise InvalidArgument("Dataset name cannot contain `/`", operation, name)
    if not all(name.split(SEPARATOR)):
        raise InvalidArgument("Dataset name has empty parts", operation, name)
    return name


def get_table_name(name: str) -> str:
    """
    Examples:
        >>> get_table_name("users.profile")
        "users"
        >>> get_table_name("users")
        "users"
    """
    return name.split(SEPARATOR, 1)[0]


def get_entity_name(name: str) -> str:
    """
    Examples:
        >>> get_entity_name("users.profile.settings")
        "profile.settings"
        >>> get_entity_name("users")
        "users"
    """
    return name.split(SEPARATOR, 1)[-1]


def is_composite(name: str) -> bool:
    """A name is composite if its entity portion holds more than one entity"""
    return SEPARATOR in get_entity_name(name)


def get_sub_entity_names(name: str) -> list[str]:
    """Ordered sub-entity names of a (composite) logical name"""
    return get_entity_name(name).split(SEPARATOR)


def make_name(table: str, entity: str) -> str:
    return f"{table}{SEPARATOR}{entity}"


def make_repository_uri(store_kind: str, host: str, port: int | str) -> str:
    """
    Examples:
        >>> make_repository_uri("hbase", "zk1", 2181)
        "repo:hbase:zk1:2181"
    """
    return f"{REPOSITORY_SCHEME}:{store_kind}:{host}:{port}"


def make_dataset_uri(repository_uri: str, name: str) -> str:
    """
    Compose the canonical dataset uri from a repository uri and a logical
    dataset name.

    Examples:
        >>> make_dataset_uri("repo:hbase:zk1:2181", "users.profile")
        "dataset:hbase:zk1:2181/users.profile"

    Raises:
        InvalidArgument: If the repository uri is not a `repo:` uri
    """
    scheme, _, rest = repository_uri.partition(":")
    if scheme != REPOSITORY_SCHEME or not rest:
        raise InvalidArgument(f"Invalid repository uri: `{repository_uri}`", name=name)
    return f"{DATASET_SCHEME}:{rest}/{name}"
