"""Generator configuration, loaded from YAML.

Example::

    title: Acme API Reference
    version: v1
    servers:
      - url: https://api.acme.test
        description: Production
    schema_groups: [Users]
    routes:
      - apply:
          headers:
            Authorization: "Bearer {token}"
          response_calls:
            methods: [GET]
            base_url: http://localhost:8000
        routes:
          - handler: acme.api.users:UserController.show
            methods: [GET, HEAD]
            uri: users/{id}
"""

from pathlib import Path
from typing import Iterator

import yaml
from pydantic import BaseModel, ValidationError

from routedoc.errors import ConfigError
from routedoc.parser.base import ApplyRules, RouteRecord

DEFAULT_LANGUAGE_TABS = {
    "bash": "Bash",
    "javascript": "Javascript",
    "python": "Python",
}


class Server(BaseModel):
    url: str
    description: str = ""


class RouteEntry(BaseModel):
    handler: str
    methods: list[str]
    uri: str


class RouteGroupConfig(BaseModel):
    """A set of routes sharing the same apply rules."""

    apply: ApplyRules = ApplyRules()
    routes: list[RouteEntry] = []


class DocConfig(BaseModel):
    title: str = "API Reference"
    version: str = "v1"
    description: str = ""
    logo: str = ""
    color: str = ""
    servers: list[Server] = []
    language_tabs: dict[str, str] = DEFAULT_LANGUAGE_TABS
    docs_url: str = "http://localhost:8000"
    schema_groups: list[str] = []  # groups whose response resources go into components.schemas
    output: str = "public/docs"
    seed: int | None = None
    routes: list[RouteGroupConfig] = []

    def iter_routes(self) -> Iterator[RouteRecord]:
        """Yield every configured route with its group's rules applied."""
        for group in self.routes:
            for entry in group.routes:
                yield RouteRecord(
                    handler=entry.handler,
                    methods=entry.methods,
                    uri=entry.uri,
                    apply=group.apply.model_copy(deep=True),
                )


def load_config(path: Path, override: Path | None = None) -> DocConfig:
    """Load a YAML config, optionally shallow-merging an override file on top."""
    data = _read_yaml(path)
    if override is not None:
        data = {**data, **_read_yaml(override)}

    try:
        return DocConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}:\n{e}") from e


def _read_yaml(path: Path) -> dict:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Configuration file {path} is not valid YAML: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {path} must contain a mapping")
    return data


DEFAULT_CONFIG_YAML = """\
# routedoc configuration

title: API Reference
version: v1
description: ""
logo: ""
color: ""

servers:
  - url: http://localhost:8000
    description: Local development server.

# Languages rendered into x-code-samples, in order.
language_tabs:
  bash: Bash
  javascript: Javascript
  python: Python

# Base URL used inside code samples.
docs_url: http://localhost:8000

# Groups whose @responseResource schemas are emitted under components.schemas.
schema_groups: []

# Directory that receives openapi.json.
output: public/docs

# Seed for placeholder parameter values; leave empty for random values.
seed:

routes:
  - apply:
      # Headers added to every documented request example.
      headers:
        Authorization: "Bearer {token}"
      # Live calls made to capture example responses when none is declared.
      response_calls:
        methods: []
        base_url: http://localhost:8000
        bindings: {}
    routes: []
    # - handler: app.api.users:UserController.show
    #   methods: [GET]
    #   uri: users/{id}
"""
