"""Docstring parser for annotated route handlers.

A structured docstring looks like::

    Fetch a user.

    Returns the user together with the requested relations.

    @group Users
    @pathParam id integer required The user id. Example: 4
    @queryParam include string Relations to load,
        comma separated.

The first line is the short description, the prose before the first tag is
the long description, and every ``@name content`` line starts a tag. Lines
that follow a tag without starting a new one continue it.
"""

import inspect
import re

from pydantic import BaseModel

TAG_PATTERN = re.compile(r"^@(\w+)(?:\s+(.*))?$")


class Tag(BaseModel):
    name: str
    content: str = ""


class DocBlock(BaseModel):
    short: str = ""
    long: str = ""
    tags: list[Tag] = []

    def tags_named(self, name: str) -> list[Tag]:
        return [t for t in self.tags if t.name == name]

    def first(self, name: str) -> Tag | None:
        for tag in self.tags:
            if tag.name == name:
                return tag
        return None

    def has_tag(self, name: str) -> bool:
        name = name.lower()
        return any(t.name.lower() == name for t in self.tags)


def parse_docblock(docstring: str | None) -> DocBlock:
    """Split a docstring into short description, long description and tags."""
    if not docstring:
        return DocBlock()

    lines = inspect.cleandoc(docstring).splitlines()
    prose: list[str] = []
    tags: list[Tag] = []
    current: Tag | None = None

    for raw in lines:
        line = raw.strip()
        match = TAG_PATTERN.match(line)
        if match:
            current = Tag(name=match.group(1), content=(match.group(2) or "").strip())
            tags.append(current)
        elif current is not None:
            if not line:
                current = None
            else:
                current.content = f"{current.content} {line}".strip()
        elif not tags:
            prose.append(line)

    while prose and not prose[0]:
        prose.pop(0)

    short = prose[0] if prose else ""
    long = "\n".join(prose[1:]).strip()
    return DocBlock(short=short, long=long, tags=tags)
