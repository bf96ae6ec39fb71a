"""TypeRegistry - resolve schema identities to specific record models."""

import re
from typing import Mapping

from anystore.logging import get_logger
from pydantic import BaseModel

from cf_datasets.exceptions import InvalidArgument, TypeResolutionFailure
from cf_datasets.model import DatasetDescriptor

log = get_logger(__name__)

IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")


def ensure_identity(name: str) -> str:
    """
    Raises:
        TypeResolutionFailure: If `name` is not a dotted identifier like
            `com.example.User`
    """
    if not isinstance(name, str) or not IDENTIFIER.match(name):
        raise TypeResolutionFailure(f"Malformed schema identity: `{name}`", "resolve")
    return name


class TypeRegistry:
    """
    Explicit mapping of schema identities to pydantic models, populated at
    startup. A schema with a registered model is "specific", every other
    schema is "generic" and handled as plain dicts.

    Example:
        ```python
        types = TypeRegistry()

        @types.register("com.example.User")
        class User(BaseModel):
            name: str
        ```
    """

    def __init__(self, types: Mapping[str, type[BaseModel]] | None = None) -> None:
        self._types: dict[str, type[BaseModel]] = {}
        for name, model in (types or {}).items():
            self.register(name, model)

    def register(self, name: str, model: type[BaseModel] | None = None):
        """Register a model for a schema identity, usable as a decorator"""
        ensure_identity(name)

        def _register(model: type[BaseModel]) -> type[BaseModel]:
            if not (isinstance(model, type) and issubclass(model, BaseModel)):
                raise InvalidArgument(f"Not a pydantic model: `{model!r}`", "register")
            self._types[name] = model
            log.debug("Registered type", schema=name, model=model.__name__)
            return model

        if model is None:
            return _register
        return _register(model)

    def resolve(self, descriptor: DatasetDescriptor | str) -> type[BaseModel] | None:
        """
        Get the specific model for a descriptor's schema identity, or `None`
        if only the generic representation is available.

        Raises:
            TypeResolutionFailure: If the schema identity is malformed
        """
        if isinstance(descriptor, DatasetDescriptor):
            name = descriptor.schema_name
        else:
            name = descriptor
        return self._types.get(ensure_identity(name))

    def is_specific(self, descriptor: DatasetDescriptor | str) -> bool:
        return self.resolve(descriptor) is not None

    def __contains__(self, name: str) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._types)
