"""Response schema parser for @responseResource classes.

A resource documents its shape with comments inside ``to_dict``::

    def to_dict(self):
        return {
            # @responseParam id integer required The user id. Example: 7
            "id": self.id,
            # @responseParam roles array The user's roles.
            "roles": [
                # @responseParam name string Role name. Enum: [admin, member]
                {"name": r.name} for r in self.roles
            ],
            # @responseParam active boolean
            "active": self.active,
        }

An ``array`` field whose value line ends in ``[`` or ``{`` opens an ``items``
scope, and an ``object``/``json`` field does the same for ``properties``.
A line holding only ``]`` or ``}`` (optionally followed by a comma) closes
the innermost open scope.
"""

import json
import re
from typing import Any, NamedTuple, Sequence

from routedoc.errors import AuthoringError, ResourceResolutionError, SchemaStructureError
from routedoc.parser.base import SchemaDescriptor, SchemaField
from routedoc.parser.docblock import Tag, parse_docblock
from routedoc.parser.introspect import HandlerIntrospector
from routedoc.parser.params import cast_to_type, normalize_type, split_param_tag

RESPONSE_PARAM_PATTERN = re.compile(r"^\s*(?:#|\*)\s*@responseParam\s+(.*?)\s*$")
CONTINUATION_PATTERN = re.compile(r"^\s*#\s*(.*?)\s*$")
CLOSE_PATTERN = re.compile(r"^\s*[\]}]\s*,?\s*$")
EXAMPLE_FRAGMENT = re.compile(r"Example:\s*(.*)")
ENUM_FRAGMENT = re.compile(r"Enum:\s*\[(.*)\]")
RESOURCE_TAG_PATTERN = re.compile(r"^(\d+)?\s*(.*)$")
STATUS_PATTERN = re.compile(r"^[1-5]\d\d$")
COMMENT_PATTERN = re.compile(r"^\s*#")

DUMMY_VALUES = {
    "integer": 1,
    "number": 1.0,
    "float": 1.0,
    "boolean": True,
    "string": "example",
}


class FieldOpen(NamedTuple):
    name: str
    field: SchemaField
    line: int
    # the field's value line ends in "[" or "{"
    opens: bool = True


class ScopeClose(NamedTuple):
    line: int


def parse_response_param(content: str) -> tuple[str, SchemaField]:
    """Parse ``<name> <type> [required] <description>`` with Example/Enum fragments."""
    name, type_name, required, description = split_param_tag(content)
    type_name = normalize_type(type_name)
    description = description.strip(" #*")

    example = None
    match = EXAMPLE_FRAGMENT.search(description)
    if match:
        example = cast_to_type(match.group(1).strip(), type_name)
        description = description.replace(match.group(0), "").strip()

    enum = None
    match = ENUM_FRAGMENT.search(description)
    if match:
        enum = [value.strip() for value in match.group(1).split(",")]
        description = description.replace(match.group(0), "").strip()

    return name, SchemaField(type=type_name, description=description, required=required, example=example, enum=enum)


def scan_schema_events(lines: Sequence[str], end_line: int | None = None) -> list[FieldOpen | ScopeClose]:
    """Reduce source lines to a flat stream of field and scope-close events."""
    end = len(lines) if end_line is None else min(end_line, len(lines))
    events: list[FieldOpen | ScopeClose] = []
    index = 0

    while index < end:
        line = lines[index]
        lineno = index + 1
        index += 1

        match = RESPONSE_PARAM_PATTERN.match(line)
        if match:
            content = match.group(1)
            while index < end:
                continuation = CONTINUATION_PATTERN.match(lines[index])
                if not continuation or not continuation.group(1) or continuation.group(1).startswith("@"):
                    break
                content = f"{content} {continuation.group(1)}"
                index += 1
            try:
                name, field = parse_response_param(content)
            except AuthoringError as e:
                raise type(e)(f"line {lineno}: {e.message}") from e
            events.append(FieldOpen(name, field, lineno, _opens_bracket(lines, index, end)))
        elif CLOSE_PATTERN.match(line):
            events.append(ScopeClose(lineno))

    return events


def _opens_bracket(lines: Sequence[str], index: int, end: int) -> bool:
    for line in lines[index:end]:
        if not line.strip() or COMMENT_PATTERN.match(line):
            continue
        return line.rstrip().endswith(("[", "{"))
    return False


def build_schema_tree(events: Sequence[FieldOpen | ScopeClose]) -> dict[str, SchemaField]:
    """Fold an event stream into a nested field tree.

    Only array and object fields whose value opens a bracket start a scope;
    the rest stay leaves. A close with no open scope is ignored: it belongs
    to the literal that ``to_dict`` itself returns.
    """
    root: dict[str, SchemaField] = {}
    current = root
    stack: list[tuple[dict[str, SchemaField], str, int]] = []

    for event in events:
        if isinstance(event, ScopeClose):
            if stack:
                current = stack.pop()[0]
            continue

        current[event.name] = event.field
        if not event.opens:
            continue
        if event.field.type == "array":
            event.field.items = {}
            stack.append((current, event.name, event.line))
            current = event.field.items
        elif event.field.type in ("object", "json"):
            event.field.properties = {}
            stack.append((current, event.name, event.line))
            current = event.field.properties

    if stack:
        unclosed = ", ".join(f"'{name}' (line {line})" for _, name, line in stack)
        raise SchemaStructureError(f"nested @responseParam scope never closed for {unclosed}")

    return root


def parse_schema(lines: Sequence[str], end_line: int | None = None) -> dict[str, SchemaField]:
    """Parse the @responseParam comments of a method body into a field tree."""
    return build_schema_tree(scan_schema_events(lines, end_line))


def generate_example(properties: dict[str, SchemaField]) -> dict[str, Any]:
    """Build an example payload, preferring author examples over dummies."""
    response: dict[str, Any] = {}
    for name, field in properties.items():
        if field.example is not None:
            response[name] = _decoded(field.example) if field.type in ("array", "object", "json") else field.example
        elif field.type == "array":
            response[name] = [generate_example(field.items)] if field.items else []
        elif field.type in ("object", "json"):
            response[name] = generate_example(field.properties or {})
        else:
            response[name] = DUMMY_VALUES.get(field.type)
    return response


def _decoded(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


class SchemaParser:
    """Turns @responseResource tags into SchemaDescriptors."""

    def __init__(self, introspector: HandlerIntrospector):
        self.introspector = introspector

    def get_schema_documentation(self, tags: list[Tag]) -> list[SchemaDescriptor]:
        schemas = []
        for tag in tags:
            if tag.name != "responseResource":
                continue

            status_code, resource_name = RESOURCE_TAG_PATTERN.match(tag.content.strip()).groups()
            source = self.introspector.resolve_resource(resource_name.strip())
            class_doc = parse_docblock(source.docstring)

            try:
                properties = parse_schema(source.lines)
            except AuthoringError as e:
                raise type(e)(f"{resource_name}.to_dict {e.message}") from e

            name = class_doc.first("resourceName")
            description = class_doc.first("resourceDescription")
            status = class_doc.first("resourceStatus")
            status = (status.content.strip() if status else None) or status_code or "200"
            if not STATUS_PATTERN.match(status):
                raise ResourceResolutionError(f"{resource_name}: @resourceStatus {status!r} is not an HTTP status code")
            schemas.append(
                SchemaDescriptor(
                    name=name.content if name else source.name,
                    status_code=status,
                    description=description.content if description else "",
                    properties=properties,
                    example=generate_example(properties),
                )
            )
        return schemas
