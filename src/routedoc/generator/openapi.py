"""OpenAPI 3.0 document assembler.

Folds parsed routes into a single document. The output is a pure function of
the routes and the config, so equal input always serializes to the same JSON.
"""

import json
from typing import Any

from routedoc.config import DocConfig
from routedoc.generator.samples import CodeSampleRenderer
from routedoc.parser.base import ParameterDescriptor, RouteDescriptor, SchemaDescriptor, SchemaField
from routedoc.parser.params import decoded_value

OPENAPI_VERSION = "3.0.0"
BODY_METHODS = {"POST", "PUT", "PATCH"}
SECURITY_SCHEMES = {
    "BearerAuth": {
        "type": "http",
        "scheme": "bearer",
        "bearerFormat": "JWT",
    },
}


def openapi_type(type_name: str) -> str:
    """Map a normalized parameter type onto an OpenAPI schema type."""
    if type_name == "float":
        return "number"
    if type_name == "json":
        return "object"
    return type_name


def group_routes(routes: list[RouteDescriptor]) -> dict[str, list[RouteDescriptor]]:
    groups: dict[str, list[RouteDescriptor]] = {}
    for route in routes:
        groups.setdefault(route.group, []).append(route)
    return groups


def path_key(uri: str) -> str:
    return "/" + uri.lstrip("/")


class OpenApiAssembler:
    """Builds the openapi.json tree from RouteDescriptors."""

    def __init__(self, config: DocConfig, renderer: CodeSampleRenderer | None = None):
        self.config = config
        self.renderer = renderer

    def assemble(self, routes: list[RouteDescriptor]) -> dict[str, Any]:
        return {
            "openapi": OPENAPI_VERSION,
            "info": self.build_info(),
            "components": {
                "securitySchemes": SECURITY_SCHEMES,
                "schemas": self.build_schemas(routes),
            },
            "servers": [server.model_dump() for server in self.config.servers],
            "paths": self.build_paths(routes),
        }

    def to_json(self, routes: list[RouteDescriptor]) -> str:
        return json.dumps(self.assemble(routes), ensure_ascii=False)

    def build_info(self) -> dict[str, Any]:
        return {
            "title": self.config.title,
            "version": self.config.version,
            "description": self.config.description,
            "x-logo": {
                "url": self.config.logo,
                "altText": self.config.title,
                "backgroundColor": self.config.color,
            },
        }

    def build_paths(self, routes: list[RouteDescriptor]) -> dict[str, dict]:
        # Seed keys first so paths keep discovery order across groups
        paths: dict[str, dict] = {path_key(route.uri): {} for route in routes}
        for group_name, group in group_routes(routes).items():
            for route in group:
                if not route.methods:
                    continue
                paths[path_key(route.uri)][route.methods[0].lower()] = self.build_operation(route, group_name)
        return {key: item for key, item in paths.items() if item}

    def build_operation(self, route: RouteDescriptor, group_name: str) -> dict[str, Any]:
        operation: dict[str, Any] = {}
        if route.authenticated:
            operation["security"] = [{"BearerAuth": []}]

        operation["tags"] = [group_name]
        operation["operationId"] = route.title
        operation["description"] = route.description

        if BODY_METHODS.intersection(route.methods):
            operation["requestBody"] = {
                "description": route.description,
                "required": True,
                "content": {"application/json": {"schema": self.build_body_schema(route.body_parameters)}},
            }

        operation["parameters"] = self.build_parameters(route)
        operation["responses"] = self.build_responses(route)

        if self.renderer is not None:
            operation["x-code-samples"] = self.renderer.code_samples(self.config.language_tabs, route)

        return operation

    def build_body_schema(self, parameters: dict[str, ParameterDescriptor]) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": "object"}
        required = [name for name, param in parameters.items() if param.required]
        properties = {}
        example = {}
        for name, param in parameters.items():
            value = decoded_value(param)
            properties[name] = {
                "type": openapi_type(param.type),
                "example": value,
                "description": param.description,
            }
            example[name] = value

        if required:
            schema["required"] = required
        if properties:
            schema["properties"] = properties
            schema["example"] = example
        return schema

    def build_parameters(self, route: RouteDescriptor) -> list[dict[str, Any]]:
        parameters = []
        for location, params in (("path", route.path_parameters), ("query", route.query_parameters)):
            for name, param in params.items():
                parameters.append(
                    {
                        "in": location,
                        "name": name,
                        "description": param.description,
                        # OpenAPI requires every path parameter to be required
                        "required": True if location == "path" else param.required,
                        "schema": {
                            "type": openapi_type(param.type),
                            "example": decoded_value(param),
                        },
                    }
                )

        for header, value in route.headers.items():
            if header == "Authorization":
                continue
            parameters.append(
                {
                    "in": "header",
                    "name": header,
                    "description": "",
                    "required": True,
                    "schema": {
                        "type": "string",
                        "default": value,
                        "example": value,
                    },
                }
            )
        return parameters

    def build_responses(self, route: RouteDescriptor) -> dict[str, Any]:
        response: dict[str, Any] = {"description": "success"}
        if route.response:
            response["content"] = {
                "application/json": {
                    "schema": {
                        "type": "object",
                        "example": json.loads(route.response[0].content),
                    },
                },
            }
        return {"200": response}

    def build_schemas(self, routes: list[RouteDescriptor]) -> dict[str, Any]:
        schemas: dict[str, Any] = {}
        for route in routes:
            if route.group not in self.config.schema_groups:
                continue
            for schema in route.schemas:
                schemas[schema.name] = self.build_schema_component(schema)
        return schemas

    def build_schema_component(self, schema: SchemaDescriptor) -> dict[str, Any]:
        component = self.build_object_schema(schema.properties)
        if schema.description:
            component["description"] = schema.description
        component["example"] = schema.example
        return component

    def build_object_schema(self, fields: dict[str, SchemaField]) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": "object"}
        required = [name for name, field in fields.items() if field.required]
        if required:
            schema["required"] = required
        schema["properties"] = {name: self.build_field_schema(field) for name, field in fields.items()}
        return schema

    def build_field_schema(self, field: SchemaField) -> dict[str, Any]:
        if field.type == "array":
            schema = {"type": "array", "items": self.build_object_schema(field.items) if field.items else {}}
        elif field.type in ("object", "json"):
            schema = self.build_object_schema(field.properties or {})
        else:
            schema = {"type": openapi_type(field.type)}

        if field.description:
            schema["description"] = field.description
        if field.enum:
            schema["enum"] = field.enum
        if field.example is not None:
            schema["example"] = field.example
        return schema
