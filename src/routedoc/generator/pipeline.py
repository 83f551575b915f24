"""Generation pipeline: route records in, openapi.json out."""

import json
import logging
import random
from pathlib import Path
from typing import Any, Iterable

from pydantic import BaseModel

from routedoc.config import DocConfig
from routedoc.errors import AuthoringError, GenerationError, OutputError
from routedoc.generator.openapi import OpenApiAssembler
from routedoc.generator.response import ResponseResolver
from routedoc.generator.samples import CodeSampleRenderer
from routedoc.parser.annotations import AnnotationParser
from routedoc.parser.base import RouteDescriptor, RouteRecord
from routedoc.parser.docblock import parse_docblock
from routedoc.parser.introspect import HandlerIntrospector, HandlerSource, PythonIntrospector

logger = logging.getLogger(__name__)

OUTPUT_FILENAME = "openapi.json"


class RouteFailure(BaseModel):
    methods: list[str]
    uri: str
    handler: str | None = None
    error: str


class DocumentationGenerator:
    """Runs one generation pass over a sequence of route records.

    Authoring errors in one route never stop the others from being parsed.
    In strict mode they abort the run once every route has been seen;
    otherwise the failing routes are left out of the document.
    """

    def __init__(
        self,
        config: DocConfig,
        introspector: HandlerIntrospector | None = None,
        resolver: ResponseResolver | None = None,
        renderer: CodeSampleRenderer | None = None,
        strict: bool = True,
    ):
        self.config = config
        self.introspector = introspector or PythonIntrospector()
        self.parser = AnnotationParser(
            self.introspector,
            resolver if resolver is not None else ResponseResolver(),
            random.Random(config.seed),
        )
        self.assembler = OpenApiAssembler(config, renderer or CodeSampleRenderer(config.docs_url))
        self.strict = strict
        self.failures: list[RouteFailure] = []
        self.skipped: list[str] = []

    def process_routes(self, records: Iterable[RouteRecord]) -> list[RouteDescriptor]:
        self.failures = []
        self.skipped = []
        parsed = []
        for record in records:
            label = f"[{','.join(record.documented_methods)}] {record.uri}"
            try:
                source = self.documentable_source(record)
                if source is None:
                    logger.warning("Skipping route: %s", label)
                    self.skipped.append(label)
                    continue
                route = self.parser.process_route(record, source)
            except AuthoringError as e:
                logger.error("Documentation error in route %s: %s", label, e)
                self.failures.append(
                    RouteFailure(methods=record.documented_methods, uri=record.uri, handler=e.handler, error=str(e))
                )
                continue

            parsed.append(route)
            logger.info("Processed route: %s", label)
        return parsed

    def documentable_source(self, record: RouteRecord) -> HandlerSource | None:
        """Return the handler source, or None for inline, missing or hidden handlers."""
        if record.handler is None or not isinstance(record.handler, str):
            return None
        source = self.introspector.resolve_handler(record.handler)
        if source is None:
            return None
        if AnnotationParser.is_hidden(parse_docblock(source.method_doc)):
            return None
        return source

    def generate(self, records: Iterable[RouteRecord]) -> dict[str, Any]:
        routes = self.process_routes(records)
        if self.failures and self.strict:
            raise GenerationError(self.failures)
        return self.assembler.assemble(routes)

    def write(self, document: dict[str, Any], output_dir: Path) -> Path:
        """Write the document as openapi.json in a single write."""
        path = output_dir / OUTPUT_FILENAME
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(document, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise OutputError(f"Cannot write {path}: {e}") from e
        return path
