"""TablePool - the shared connection to the backing store."""

import threading

from anystore.logging import get_logger
from anystore.store import BaseStore, get_store
from anystore.types import Uri

from cf_datasets.core.conventions import path
from cf_datasets.exceptions import ConnectionFailure
from cf_datasets.storage.table import TableStore

log = get_logger(__name__)


class TablePool:
    """
    Process-wide pool of table handles over one backing store. One pool is
    created per repository and passed to every component that needs store
    access (daos, schema registry). Safe for concurrent use.
    """

    def __init__(self, uri: Uri) -> None:
        self.uri = uri
        try:
            self.store: BaseStore = get_store(
                uri, serialization_mode="raw", raise_on_nonexist=False
            )
        except Exception as e:
            raise ConnectionFailure(f"Cannot open store: `{uri}`", "connect") from e
        self._tables: dict[str, TableStore] = {}
        self._lock = threading.Lock()

    def get_table(self, name: str) -> TableStore:
        with self._lock:
            if name not in self._tables:
                self._tables[name] = TableStore(name, self.store)
            return self._tables[name]

    def ping(self) -> None:
        """
        Check that the backing store is reachable and writable.

        Raises:
            ConnectionFailure: If the store is not usable
        """
        try:
            self.store.put(path.PING, b"")
            self.store.exists(path.PING)
        except Exception as e:
            raise ConnectionFailure(f"Store not reachable: `{self.uri}`", "ping") from e
        log.debug("Store reachable", uri=str(self.uri))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.uri})>"
