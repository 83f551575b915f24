import pytest

from routedoc.config import DEFAULT_CONFIG_YAML, DocConfig, load_config
from routedoc.errors import ConfigError

CONFIG = """\
title: Acme API
version: v3
schema_groups: [Users]
routes:
  - apply:
      headers:
        Authorization: Bearer abc
      response_calls:
        methods: [GET]
    routes:
      - handler: app.users:UserController.show
        methods: [GET, HEAD]
        uri: users/{id}
      - handler: app.users:UserController.store
        methods: [POST]
        uri: users
"""


class TestLoadConfig:
    def test_load_and_iterate_routes(self, tmp_path):
        path = tmp_path / "routedoc.yaml"
        path.write_text(CONFIG)
        config = load_config(path)

        assert config.title == "Acme API"
        assert config.language_tabs == {"bash": "Bash", "javascript": "Javascript", "python": "Python"}
        records = list(config.iter_routes())
        assert [r.uri for r in records] == ["users/{id}", "users"]
        assert records[0].documented_methods == ["GET"]
        assert records[0].apply.headers == {"Authorization": "Bearer abc"}
        assert records[0].apply.response_calls.allows("GET")
        assert not records[0].apply.response_calls.allows("POST")

    def test_routes_get_independent_rules(self, tmp_path):
        path = tmp_path / "routedoc.yaml"
        path.write_text(CONFIG)
        first, second = load_config(path).iter_routes()
        first.apply.headers["X"] = "1"
        assert "X" not in second.apply.headers

    def test_override_is_merged(self, tmp_path):
        base = tmp_path / "base.yaml"
        base.write_text(CONFIG)
        override = tmp_path / "custom.yaml"
        override.write_text("title: Partner API\nroutes: []\n")
        config = load_config(base, override)
        assert config.title == "Partner API"
        assert config.version == "v3"
        assert config.routes == []

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("title: [unclosed")
        with pytest.raises(ConfigError, match="not valid YAML"):
            load_config(path)

    def test_schema_violation(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("routes: 3\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "nope.yaml")

    def test_default_config_is_loadable(self, tmp_path):
        path = tmp_path / "routedoc.yaml"
        path.write_text(DEFAULT_CONFIG_YAML)
        config = load_config(path)
        assert isinstance(config, DocConfig)
        assert config.seed is None
        assert list(config.iter_routes()) == []
