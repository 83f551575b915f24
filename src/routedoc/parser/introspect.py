"""Source introspection behind a small interface.

The annotation parser only needs docstrings and the source of response
resource methods. PythonIntrospector reads them from importable code;
tests and other frameworks can supply their own HandlerIntrospector.
"""

import importlib
import inspect
from typing import Protocol

from pydantic import BaseModel

from routedoc.errors import HandlerResolutionError, ResourceResolutionError, SourceUnavailableError

RESOURCE_METHOD = "to_dict"


class HandlerSource(BaseModel):
    identity: str
    method_doc: str | None = None
    owner_doc: str | None = None  # declaring class, or module for plain functions


class ResourceSource(BaseModel):
    name: str
    docstring: str | None = None
    lines: list[str]  # source of the resource's to_dict method


class HandlerIntrospector(Protocol):
    def resolve_handler(self, identity: str) -> HandlerSource | None:
        """Return the handler's docstrings, or None when the handler is not defined."""
        ...

    def resolve_resource(self, dotted_name: str) -> ResourceSource:
        ...


class PythonIntrospector:
    """Resolve ``package.module:Class.method`` handlers with importlib and inspect."""

    def resolve_handler(self, identity: str) -> HandlerSource | None:
        module_name, _, attr_path = identity.partition(":")
        if not module_name or not attr_path:
            raise HandlerResolutionError("expected a handler of the form 'package.module:Class.method'", identity)

        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise HandlerResolutionError(f"cannot import module {module_name!r}: {e}", identity) from e

        owner_path, _, func_name = attr_path.rpartition(".")
        owner = module
        for part in owner_path.split(".") if owner_path else []:
            owner = getattr(owner, part, None)
            if owner is None:
                raise HandlerResolutionError(f"{module_name} has no attribute {owner_path!r}", identity)

        func = getattr(owner, func_name, None)
        if func is None:
            return None

        return HandlerSource(identity=identity, method_doc=func.__doc__, owner_doc=owner.__doc__)

    def resolve_resource(self, dotted_name: str) -> ResourceSource:
        module_name, _, class_name = dotted_name.replace(":", ".").rpartition(".")
        cls = None
        if module_name:
            try:
                cls = getattr(importlib.import_module(module_name), class_name, None)
            except ImportError:
                cls = None

        if not inspect.isclass(cls):
            raise ResourceResolutionError(
                f"Error in @responseResource annotation: class '{dotted_name}' does not exist.\n\n"
                "Please provide the fully qualified class name, including the module.\n"
                "Example: @responseResource app.resources.UserResource\n\n"
                "To document a different status code, put it before the class name.\n"
                "Example: @responseResource 201 app.resources.UserResource"
            )

        method = getattr(cls, RESOURCE_METHOD, None)
        if method is None:
            raise ResourceResolutionError(
                f"Error in @responseResource annotation: class '{dotted_name}' has no {RESOURCE_METHOD}() method "
                "to read @responseParam comments from."
            )

        try:
            lines, _ = inspect.getsourcelines(method)
        except (OSError, TypeError) as e:
            raise SourceUnavailableError(f"cannot read source of {dotted_name}.{RESOURCE_METHOD}: {e}") from e

        return ResourceSource(name=cls.__name__, docstring=cls.__doc__, lines=lines)
