"""Example response resolution.

Declared ``@response [status] {json}`` tags win. Otherwise, when the route's
response-call policy allows it, the live endpoint is probed once. A failed
probe only means the route is documented without an example.
"""

import json
import logging
import re

import requests

from routedoc.errors import AnnotationError
from routedoc.parser.base import ParameterDescriptor, ResponseExample, RouteRecord
from routedoc.parser.docblock import Tag
from routedoc.parser.params import clean_params

logger = logging.getLogger(__name__)

RESPONSE_TAG_PATTERN = re.compile(r"^(\d{3})?\s*(.*)$", re.DOTALL)
PLACEHOLDER_PATTERN = re.compile(r"\{(\w+)\??\}")


class ResponseResolver:
    """Finds an example response for a route."""

    def get_response(
        self,
        record: RouteRecord,
        tags: list[Tag],
        path: dict[str, ParameterDescriptor] | None = None,
        query: dict[str, ParameterDescriptor] | None = None,
        body: dict[str, ParameterDescriptor] | None = None,
        allow_call: bool = True,
    ) -> list[ResponseExample]:
        declared = self.get_declared_responses(tags)
        if declared or not allow_call:
            return declared

        policy = record.apply.response_calls
        methods = record.documented_methods
        if not methods or not policy.allows(methods[0]):
            return []

        return self.call_route(record, path or {}, query or {}, body or {})

    def get_declared_responses(self, tags: list[Tag]) -> list[ResponseExample]:
        responses = []
        for tag in tags:
            if tag.name != "response":
                continue
            status, content = RESPONSE_TAG_PATTERN.match(tag.content.strip()).groups()
            try:
                json.loads(content)
            except json.JSONDecodeError as e:
                raise AnnotationError(f"@response body is not valid JSON: {e}") from e
            responses.append(ResponseExample(status_code=int(status or 200), content=content))
        return responses

    def call_route(
        self,
        record: RouteRecord,
        path: dict[str, ParameterDescriptor],
        query: dict[str, ParameterDescriptor],
        body: dict[str, ParameterDescriptor],
    ) -> list[ResponseExample]:
        policy = record.apply.response_calls
        method = record.documented_methods[0]
        url = f"{policy.base_url.rstrip('/')}/{self.bind_uri(record.uri, policy.bindings, path).lstrip('/')}"

        headers = {**policy.headers, **record.apply.headers}
        params = {**clean_params(query), **policy.query}
        payload = None
        if method not in ("GET", "DELETE"):
            payload = {**clean_params(body), **policy.body}

        try:
            resp = requests.request(method, url, headers=headers, params=params, json=payload, timeout=policy.timeout)
        except requests.RequestException as e:
            logger.warning("Response call to %s %s failed: %s", method, url, e)
            return []

        if not resp.ok:
            logger.warning("Response call to %s %s returned %s", method, url, resp.status_code)
            return []

        try:
            json.loads(resp.text)
        except ValueError:
            logger.warning("Response call to %s %s did not return JSON", method, url)
            return []

        return [ResponseExample(status_code=resp.status_code, content=resp.text)]

    @staticmethod
    def bind_uri(uri: str, bindings: dict[str, str], path: dict[str, ParameterDescriptor]) -> str:
        """Fill URI placeholders from configured bindings, then path parameter examples."""
        for placeholder, value in bindings.items():
            uri = uri.replace(placeholder, str(value))

        def substitute(match: re.Match) -> str:
            param = path.get(match.group(1))
            return match.group(0) if param is None else str(param.value)

        return PLACEHOLDER_PATTERN.sub(substitute, uri)
