"""Data models shared by the annotation parser and the document assembler.

Route suppliers produce RouteRecord objects; the annotation parser turns
each of them into a RouteDescriptor, which is all the assembler consumes.
"""

from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field


class ParameterDescriptor(BaseModel):
    """A single documented path, query or body parameter."""

    type: str = "string"  # normalized, see params.normalize_type
    description: str = ""
    required: bool = False
    value: Any = None  # author example or synthesized placeholder


class SchemaField(BaseModel):
    """One node of a parsed response shape."""

    type: str
    description: str = ""
    required: bool = False
    example: Any = None
    enum: list[str] | None = None
    items: dict[str, "SchemaField"] | None = None  # array fields only
    properties: dict[str, "SchemaField"] | None = None  # object / json fields only


class SchemaDescriptor(BaseModel):
    """A response resource declared with @responseResource."""

    name: str
    status_code: str = "200"
    description: str = ""
    properties: dict[str, SchemaField] = {}
    example: dict[str, Any] = {}


class ResponseExample(BaseModel):
    """An example response body, declared or captured from a live call."""

    status_code: int = 200
    content: str  # raw body, expected to be JSON


class ResponseCallPolicy(BaseModel):
    """Settings for probing a live endpoint to capture an example response."""

    methods: list[str] = []  # "*" means every method, empty disables calls
    base_url: str = "http://localhost:8000"
    bindings: dict[str, str] = {}  # {"{user}": "1"}
    headers: dict[str, str] = {
        "Content-Type": "application/json",
        "Accept": "application/json",
    }
    query: dict[str, Any] = {}
    body: dict[str, Any] = {}
    timeout: float = 10.0

    def allows(self, method: str) -> bool:
        allowed = [m.upper() for m in self.methods]
        return "*" in allowed or method.upper() in allowed


class ApplyRules(BaseModel):
    """Per-route overrides applied while documenting a route."""

    headers: dict[str, str] = {}
    response_calls: ResponseCallPolicy = ResponseCallPolicy()


class RouteRecord(BaseModel):
    """A candidate route yielded by a route supplier."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    handler: str | Callable | None  # "pkg.module:Class.method" or an inline callable
    methods: list[str]
    uri: str
    apply: ApplyRules = ApplyRules()

    @property
    def documented_methods(self) -> list[str]:
        return [m.upper() for m in self.methods if m.upper() != "HEAD"]


class RouteDescriptor(BaseModel):
    """A fully parsed, documented route."""

    model_config = ConfigDict(frozen=True)

    id: str
    group: str
    title: str
    description: str = ""
    methods: list[str]
    uri: str
    authenticated: bool = False
    headers: dict[str, str] = {}
    path_parameters: dict[str, ParameterDescriptor] = {}
    query_parameters: dict[str, ParameterDescriptor] = {}
    body_parameters: dict[str, ParameterDescriptor] = {}
    response: list[ResponseExample] = []
    show_response: bool = False
    schemas: list[SchemaDescriptor] = Field(default_factory=list)
