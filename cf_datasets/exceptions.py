"""Error taxonomy of the dataset repository.

Every error carries the `operation` and the logical dataset `name` it
occurred for (when known). The underlying cause is chained via `raise ... from`.
"""

from anystore.exceptions import DoesNotExist


class DatasetError(Exception):
    """Base error for all dataset repository failures"""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        name: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.name = name

    def __str__(self) -> str:
        context = []
        if self.operation:
            context.append(f"operation=`{self.operation}`")
        if self.name:
            context.append(f"name=`{self.name}`")
        cause = self.__cause__
        if cause is not None:
            context.append(f"cause={cause.__class__.__name__}: {cause}")
        if context:
            return f"{self.message} ({', '.join(context)})"
        return self.message


class InvalidArgument(DatasetError, ValueError):
    """Empty name, missing descriptor or otherwise invalid input"""


class NotFound(DatasetError, DoesNotExist):
    """No schema is registered for the given name"""


class AlreadyExists(DatasetError):
    """A schema is already registered for the given name"""


class IncompatibleSchema(DatasetError):
    """The registry rejected an updated descriptor"""


class TypeResolutionFailure(DatasetError):
    """A schema identity could not be parsed for type resolution"""


class ConnectionFailure(DatasetError):
    """The backing store is not reachable or not configured"""


class Unsupported(DatasetError, NotImplementedError):
    """The operation is intentionally not supported"""
