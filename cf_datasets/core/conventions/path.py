"""
Path conventions for the column-family store layout.

Tables and schemas live side by side in one backing anystore. All paths are
relative to the store uri.

Store Layout
------------

::

    [uri]/
        .ping                               # connectivity probe key

        schemas/
            [table]/
                [entity]/
                    v000001.json            # descriptor versions
                    v000002.json

        tables/
            [table]/
                [row_key].json              # one physical row, base64 encoded key
"""

import base64

from anystore.util import join_relpaths

PING = ".ping"
"""Connectivity probe key"""

SCHEMAS = "schemas"
"""Schema registry prefix"""

TABLES = "tables"
"""Table rows prefix"""

VERSION_FORMAT = "v{:06d}.json"


def schema_prefix(table: str, entity: str | None = None) -> str:
    if entity is None:
        return join_relpaths(SCHEMAS, table)
    return join_relpaths(SCHEMAS, table, entity)


def schema_version(table: str, entity: str, version: int) -> str:
    """
    Examples:
        >>> schema_version("users", "profile", 2)
        "schemas/users/profile/v000002.json"
    """
    return join_relpaths(schema_prefix(table, entity), VERSION_FORMAT.format(version))


def parse_version(key: str) -> int:
    """Get the version number from a schema version key"""
    name = key.rsplit("/", 1)[-1]
    return int(name[1:].split(".")[0])


def table_prefix(table: str) -> str:
    return join_relpaths(TABLES, table)


def encode_row_key(row_key: str) -> str:
    """
    Encode a row key as one opaque path segment (urlsafe base64 without
    padding). The backing store must not split or unquote row keys.

    Examples:
        >>> encode_row_key("alice/1")
        "YWxpY2UvMQ"
    """
    return base64.urlsafe_b64encode(row_key.encode("utf-8")).decode().rstrip("=")


def decode_row_key(segment: str) -> str:
    padded = segment + "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(padded.encode()).decode("utf-8")


def row(table: str, row_key: str) -> str:
    """
    Get the storage path for a row

    Examples:
        >>> row("users", "alice/1")
        "tables/users/YWxpY2UvMQ.json"
    """
    return join_relpaths(table_prefix(table), f"{encode_row_key(row_key)}.json")


def row_key(key: str) -> str:
    """Reverse of `row`: get the row key from a storage path"""
    name = key.rsplit("/", 1)[-1]
    return decode_row_key(name.removesuffix(".json"))
