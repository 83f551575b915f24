"""Request code samples rendered into each operation's x-code-samples."""

import json
import pprint
from pathlib import Path
from urllib.parse import urlencode

from jinja2 import Environment, FileSystemLoader, TemplateNotFound

from routedoc.errors import ConfigError
from routedoc.parser.base import RouteDescriptor
from routedoc.parser.params import clean_params

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


class CodeSampleRenderer:
    """Renders one request example per language from jinja2 templates."""

    def __init__(self, base_url: str, templates_dir: Path = TEMPLATES_DIR):
        self.base_url = base_url.rstrip("/")
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["json"] = lambda value, indent=None: json.dumps(value, indent=indent, ensure_ascii=False)
        self.env.filters["pyrepr"] = lambda value: pprint.pformat(value, sort_dicts=False)

    def render(self, lang: str, route: RouteDescriptor) -> str:
        try:
            template = self.env.get_template(f"{lang}.j2")
        except TemplateNotFound as e:
            raise ConfigError(f"No code sample template for language {lang!r}") from e
        return template.render(**self._context(route)).strip()

    def code_samples(self, language_tabs: dict[str, str], route: RouteDescriptor) -> list[dict]:
        return [{"lang": name, "source": self.render(lang, route)} for lang, name in language_tabs.items()]

    def _context(self, route: RouteDescriptor) -> dict:
        url = f"{self.base_url}/{route.uri.lstrip('/')}"
        query = clean_params(route.query_parameters)
        body = clean_params(route.body_parameters)
        return {
            "method": route.methods[0] if route.methods else "GET",
            "url": url,
            "full_url": f"{url}?{urlencode(query, doseq=True)}" if query else url,
            "headers": route.headers,
            "headers_with_defaults": {**route.headers, **{k: v for k, v in DEFAULT_HEADERS.items() if k not in route.headers}},
            "query": query,
            "body": body,
        }
