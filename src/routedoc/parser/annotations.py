"""Annotation parser: turns an annotated handler into a RouteDescriptor."""

import hashlib
import json
import logging
import random

from routedoc.errors import AuthoringError
from routedoc.generator.response import ResponseResolver
from routedoc.parser.base import ParameterDescriptor, ResponseExample, RouteDescriptor, RouteRecord
from routedoc.parser.docblock import DocBlock, Tag, parse_docblock
from routedoc.parser.introspect import HandlerIntrospector, HandlerSource
from routedoc.parser.params import clean_params, parse_param_tag
from routedoc.parser.schema import SchemaParser

logger = logging.getLogger(__name__)

DEFAULT_GROUP = "general"


class AnnotationParser:
    """Builds RouteDescriptors from handler docstrings."""

    def __init__(
        self,
        introspector: HandlerIntrospector,
        resolver: ResponseResolver | None = None,
        rng: random.Random | None = None,
    ):
        self.introspector = introspector
        self.resolver = resolver
        self.rng = rng or random.Random()
        self.schema_parser = SchemaParser(introspector)

    def process_route(self, record: RouteRecord, source: HandlerSource) -> RouteDescriptor:
        """Parse one route. Authoring errors are re-raised tagged with the handler."""
        try:
            return self._process(record, source)
        except AuthoringError as e:
            if e.handler is None:
                e.handler = source.identity
            raise

    def _process(self, record: RouteRecord, source: HandlerSource) -> RouteDescriptor:
        methods = record.documented_methods
        docblock = parse_docblock(source.method_doc)

        path_parameters = self.get_parameters(docblock.tags, "pathParam")
        query_parameters = self.get_parameters(docblock.tags, "queryParam")
        body_parameters = self.get_parameters(docblock.tags, "bodyParam")
        self.check_nesting(query_parameters, "queryParam")
        self.check_nesting(body_parameters, "bodyParam")
        schemas = self.schema_parser.get_schema_documentation(docblock.tags)
        authenticated = docblock.has_tag("authenticated")

        response: list[ResponseExample] = []
        if self.resolver is not None:
            response = self.resolver.get_response(
                record,
                docblock.tags,
                path=path_parameters,
                query=query_parameters,
                body=body_parameters,
                allow_call=not schemas,
            )
        if not response and schemas:
            first = schemas[0]
            response = [ResponseExample(status_code=int(first.status_code), content=json.dumps(first.example))]

        logger.debug(
            "Parsed %s: %d path, %d query, %d body parameters, %d schemas",
            source.identity,
            len(path_parameters),
            len(query_parameters),
            len(body_parameters),
            len(schemas),
        )

        headers = dict(record.apply.headers)
        if not authenticated and "Authorization" in headers:
            del headers["Authorization"]

        return RouteDescriptor(
            id=route_id(record.uri, methods),
            group=self.get_route_group(source),
            title=docblock.short,
            description=docblock.long,
            methods=methods,
            uri=record.uri,
            authenticated=authenticated,
            headers=headers,
            path_parameters=path_parameters,
            query_parameters=query_parameters,
            body_parameters=body_parameters,
            response=response,
            show_response=bool(response),
            schemas=schemas,
        )

    def get_parameters(self, tags: list[Tag], kind: str) -> dict[str, ParameterDescriptor]:
        parameters = {}
        for tag in tags:
            if tag.name != kind:
                continue
            try:
                name, parameter = parse_param_tag(tag.content, self.rng)
            except AuthoringError as e:
                raise type(e)(f"@{kind}: {e.message}") from e
            parameters[name] = parameter
        return parameters

    @staticmethod
    def check_nesting(parameters: dict[str, ParameterDescriptor], kind: str) -> None:
        """Reject dotted parameter names that cannot be expanded together."""
        try:
            clean_params(parameters)
        except AuthoringError as e:
            raise type(e)(f"@{kind}: {e.message}") from e

    def get_route_group(self, source: HandlerSource) -> str:
        # @group on the handler overrides the one on its class
        for doc in (source.method_doc, source.owner_doc):
            tag = parse_docblock(doc).first("group")
            if tag is not None and tag.content:
                return tag.content
        return DEFAULT_GROUP

    @staticmethod
    def is_hidden(docblock: DocBlock) -> bool:
        return docblock.first("hideFromAPIDocumentation") is not None


def route_id(uri: str, methods: list[str]) -> str:
    return hashlib.md5(f"{uri}:{''.join(methods)}".encode("utf-8")).hexdigest()
