import json

from click.testing import CliRunner

from routedoc.cli import main


def _write_config(tmp_path, handler: str, output) -> str:
    path = tmp_path / "routedoc.yaml"
    path.write_text(
        f"""\
title: Sample API
output: {output}
schema_groups: [Users]
routes:
  - apply:
      headers:
        Api-Version: "2"
    routes:
      - handler: {handler}
        methods: [GET]
        uri: users/{{id}}
      - handler: sample_api:health
        methods: [GET]
        uri: health
"""
    )
    return str(path)


class TestCliGenerate:
    def test_generate_writes_document(self, sample_api, tmp_path):
        output = tmp_path / "public"
        config = _write_config(tmp_path, "sample_api:UserController.show", output)

        result = CliRunner().invoke(main, ["generate", config, "--seed", "3"])

        assert result.exit_code == 0, result.output
        assert "Documenting 2 routes" in result.output
        document = json.loads((output / "openapi.json").read_text(encoding="utf-8"))
        assert document["info"]["title"] == "Sample API"
        assert list(document["paths"]) == ["/users/{id}", "/health"]
        assert list(document["components"]["schemas"]) == ["User"]

    def test_output_option_overrides_config(self, sample_api, tmp_path):
        config = _write_config(tmp_path, "sample_api:UserController.show", tmp_path / "unused")
        result = CliRunner().invoke(main, ["generate", config, "-o", str(tmp_path / "out")])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "out" / "openapi.json").exists()
        assert not (tmp_path / "unused").exists()

    def test_authoring_error_fails_without_writing(self, sample_api, tmp_path):
        output = tmp_path / "public"
        config = _write_config(tmp_path, "sample_api:UserController.broken", output)

        result = CliRunner().invoke(main, ["generate", config])

        assert result.exit_code != 0
        assert "documentation errors" in result.output
        assert not (output / "openapi.json").exists()

    def test_keep_going_reports_left_out_routes(self, sample_api, tmp_path):
        output = tmp_path / "public"
        config = _write_config(tmp_path, "sample_api:UserController.broken", output)

        result = CliRunner().invoke(main, ["generate", config, "--keep-going"])

        assert result.exit_code == 0, result.output
        assert "Left out 1 routes" in result.output
        document = json.loads((output / "openapi.json").read_text(encoding="utf-8"))
        assert list(document["paths"]) == ["/health"]

    def test_invalid_config(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("routes: 3\n")
        result = CliRunner().invoke(main, ["generate", str(path)])
        assert result.exit_code != 0
        assert "Invalid configuration" in result.output


class TestCliInitConfig:
    def test_writes_starter_config(self, tmp_path):
        path = tmp_path / "conf" / "routedoc.yaml"
        result = CliRunner().invoke(main, ["init-config", str(path)])
        assert result.exit_code == 0
        assert "schema_groups" in path.read_text(encoding="utf-8")

    def test_refuses_to_overwrite(self, tmp_path):
        path = tmp_path / "routedoc.yaml"
        path.write_text("title: Mine\n")
        result = CliRunner().invoke(main, ["init-config", str(path)])
        assert result.exit_code != 0
        assert path.read_text() == "title: Mine\n"

    def test_force_overwrites(self, tmp_path):
        path = tmp_path / "routedoc.yaml"
        path.write_text("title: Mine\n")
        result = CliRunner().invoke(main, ["init-config", str(path), "--force"])
        assert result.exit_code == 0
        assert "title: API Reference" in path.read_text()
