"""Parameter tag grammar and value helpers.

Shared by the handler annotation parser (pathParam / queryParam / bodyParam)
and the nested response schema parser (responseParam).
"""

import json
import random
import re
import string
from typing import Any

from routedoc.errors import AnnotationError
from routedoc.parser.base import ParameterDescriptor

NORMALIZED_TYPES = ("string", "integer", "number", "float", "boolean", "array", "object", "json")

TYPE_ALIASES = {
    "int": "integer",
    "bool": "boolean",
    "double": "float",
    "str": "string",
    "list": "array",
    "dict": "object",
}

# <name> <type> [required] [description]
PARAM_PATTERN = re.compile(r"^(\S+?)\s+(\S+?)\s+(required\s+)?(.*)$", re.DOTALL)
EXAMPLE_PATTERN = re.compile(r"^(.*?)\s*\bExample:\s*(.*?)\s*$", re.DOTALL)

FALSE_LITERALS = {"false", "0", ""}


def normalize_type(type_name: str | None) -> str:
    """Map a declared type onto one of NORMALIZED_TYPES, defaulting to string."""
    if not type_name:
        return "string"
    lowered = type_name.strip().lower()
    lowered = TYPE_ALIASES.get(lowered, lowered)
    return lowered if lowered in NORMALIZED_TYPES else "string"


def generate_dummy_value(type_name: str, rng: random.Random | None = None) -> Any:
    """Synthesize a placeholder value for a parameter without an example."""
    rng = rng or random.Random()
    fakes = {
        "integer": lambda: rng.randint(1, 20),
        "number": lambda: round(rng.uniform(0, 1000), 2),
        "float": lambda: round(rng.uniform(0, 1000), 2),
        "boolean": lambda: rng.choice([True, False]),
        "string": lambda: "".join(rng.choice(string.ascii_letters + string.digits) for _ in range(12)),
        "array": lambda: "[]",
        "object": lambda: "{}",
        "json": lambda: "{}",
    }
    fake = fakes.get(type_name, fakes["string"])
    return fake()


def cast_to_type(value: str, type_name: str) -> Any:
    """Cast an example written in a docstring to the parameter's type."""
    if type_name == "boolean":
        # "false" is a non-empty string, so bool() alone would be wrong
        return value.strip().lower() not in FALSE_LITERALS
    try:
        if type_name == "integer":
            return int(value)
        if type_name in ("number", "float"):
            return float(value)
    except ValueError as e:
        raise AnnotationError(f"example {value!r} is not a valid {type_name}") from e
    return value


def parse_description(description: str, type_name: str) -> tuple[str, Any]:
    """Strip a trailing ``Example: <value>`` from a description.

    Returns the remaining description and the cast example, or None when the
    description carries no example.
    """
    match = EXAMPLE_PATTERN.match(description)
    if not match:
        return description, None
    return match.group(1).strip(), cast_to_type(match.group(2), type_name)


def split_param_tag(content: str) -> tuple[str, str, bool, str]:
    """Split tag content into name, raw type, required flag and description."""
    content = content.strip()
    match = PARAM_PATTERN.match(content)
    if not match:
        tokens = content.split()
        if len(tokens) != 2:
            raise AnnotationError(f"cannot parse parameter tag {content!r}, expected '<name> <type> [required] [description]'")
        name, type_name = tokens
        return name, type_name, False, ""

    name, type_name, required, description = match.groups()
    description = description.strip()
    if description == "required" and not required:
        required = description
        description = ""
    return name, type_name, bool(required and required.strip() == "required"), description


def parse_param_tag(content: str, rng: random.Random | None = None) -> tuple[str, ParameterDescriptor]:
    """Parse ``<name> <type> [required] [description [Example: <value>]]``."""
    name, type_name, required, description = split_param_tag(content)
    type_name = normalize_type(type_name)
    description, example = parse_description(description, type_name)
    value = generate_dummy_value(type_name, rng) if example is None else example
    return name, ParameterDescriptor(type=type_name, description=description, required=required, value=value)


def decoded_value(param: ParameterDescriptor) -> Any:
    """Return the parameter value, decoding "[]" and "{}" style placeholders for structured types."""
    if param.type not in ("array", "object", "json") or not isinstance(param.value, str):
        return param.value
    try:
        return json.loads(param.value)
    except json.JSONDecodeError:
        return param.value


def clean_params(params: dict[str, ParameterDescriptor]) -> dict[str, Any]:
    """Expand dot and bracket notation names into nested values.

    ``user.name``, ``user[name]``, ``tags[]`` and ``items.*.id`` all land at
    the right depth; ``*`` and ``[]`` address the first list element.
    """
    values: dict[str, Any] = {}
    for name, param in params.items():
        _set_dotted(values, _dotted_segments(name), decoded_value(param), name)
    return values


def _dotted_segments(name: str) -> list[str]:
    if "[" in name:
        name = name.replace("][", ".").replace("[", ".").replace("]", "")
    return ["0" if segment in ("*", "") else segment for segment in name.split(".")]


def _set_dotted(container: dict | list, segments: list[str], value: Any, name: str) -> None:
    key, rest = segments[0], segments[1:]

    if isinstance(container, list):
        if not key.isdigit():
            raise AnnotationError(f"parameter {name!r} mixes list and object notation")
        index = int(key)
        while len(container) <= index:
            container.append(None)
        if not rest:
            container[index] = value
            return
        if not isinstance(container[index], (dict, list)):
            container[index] = [] if rest[0].isdigit() else {}
        _set_dotted(container[index], rest, value, name)
        return

    if not rest:
        container[key] = value
        return
    if not isinstance(container.get(key), (dict, list)):
        container[key] = [] if rest[0].isdigit() else {}
    _set_dotted(container[key], rest, value, name)
