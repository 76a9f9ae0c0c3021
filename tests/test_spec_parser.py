"""
Тесты загрузки спецификаций
"""

import json
import os

import httpx
import pytest

from openapi_nest.internal.errors import SpecParseError
from openapi_nest.internal.parser.openapi import ParsedSpec, SpecParser

FIXTURE = os.path.join(os.path.dirname(__file__), "fixtures", "user.openapi.yaml")


class TestFindSpecs:
    """Тесты поиска файлов спецификаций"""

    def test_find_specs(self, tmp_path):
        """Тест рекурсивного поиска по расширениям"""
        (tmp_path / "user.openapi.yaml").write_text("openapi: 3.0.0")
        (tmp_path / "nested").mkdir()
        (tmp_path / "nested" / "order.json").write_text("{}")
        (tmp_path / "nested" / "item.yml").write_text("openapi: 3.0.0")
        (tmp_path / "README.md").write_text("# specs")

        specs = SpecParser().find_specs(str(tmp_path))

        assert specs == sorted(
            [
                str(tmp_path / "nested" / "item.yml"),
                str(tmp_path / "nested" / "order.json"),
                str(tmp_path / "user.openapi.yaml"),
            ]
        )

    def test_absent_directory(self, tmp_path):
        """Тест отсутствующей директории"""
        assert SpecParser().find_specs(str(tmp_path / "absent")) == []


class TestParseSpec:
    """Тесты разбора спецификаций"""

    def test_parse_yaml_fixture(self):
        """Тест двух представлений документа"""
        spec = SpecParser().parse_spec(FIXTURE)

        assert spec.resource_name == "user"
        assert spec.path == FIXTURE

        original_manager = spec.original["components"]["schemas"]["User"]["properties"]["manager"]
        assert original_manager == {"$ref": "#/components/schemas/User"}

        resolved_manager = spec.resolved["components"]["schemas"]["User"]["properties"]["manager"]
        assert "email" in resolved_manager["properties"]

    def test_parse_json(self, tmp_path):
        """Тест JSON спецификации"""
        spec_path = tmp_path / "order.json"
        spec_path.write_text(json.dumps({"openapi": "3.0.0", "paths": {}}))

        spec = SpecParser().parse_spec(str(spec_path))

        assert spec.original == {"openapi": "3.0.0", "paths": {}}
        assert spec.resource_name == "order"

    def test_invalid_yaml(self, tmp_path):
        """Тест битого YAML"""
        spec_path = tmp_path / "broken.yaml"
        spec_path.write_text("openapi: [3.0.0\npaths: {")

        with pytest.raises(SpecParseError) as error:
            SpecParser().parse_spec(str(spec_path))

        assert "Failed to parse OpenAPI spec" in str(error.value)
        assert str(spec_path) in str(error.value)

    def test_not_openapi_document(self, tmp_path):
        """Тест документа без поля openapi"""
        spec_path = tmp_path / "config.yaml"
        spec_path.write_text("name: not a spec\n")

        with pytest.raises(SpecParseError) as error:
            SpecParser().parse_spec(str(spec_path))

        assert "Failed to parse OpenAPI spec" in str(error.value)

    def test_missing_file(self, tmp_path):
        """Тест отсутствующего файла"""
        with pytest.raises(SpecParseError):
            SpecParser().parse_spec(str(tmp_path / "missing.yaml"))

    def test_parse_url(self, monkeypatch):
        """Тест загрузки спецификации по URL"""
        requested = {}

        def fake_get(url, timeout=None, follow_redirects=False):
            requested["url"] = url
            return httpx.Response(
                200,
                text="openapi: 3.0.0\npaths: {}\n",
                request=httpx.Request("GET", url),
            )

        monkeypatch.setattr(httpx, "get", fake_get)

        spec = SpecParser().parse_spec("https://example.com/specs/order.yaml")

        assert requested["url"] == "https://example.com/specs/order.yaml"
        assert spec.original["openapi"] == "3.0.0"
        assert spec.resource_name == "order"

    def test_parse_url_http_error(self, monkeypatch):
        """Тест ошибки HTTP при загрузке по URL"""

        def fake_get(url, timeout=None, follow_redirects=False):
            return httpx.Response(404, text="not found", request=httpx.Request("GET", url))

        monkeypatch.setattr(httpx, "get", fake_get)

        with pytest.raises(SpecParseError):
            SpecParser().parse_spec("https://example.com/specs/order.yaml")


class TestResolveRef:
    """Тесты resolve_ref"""

    def test_resolve_ref(self):
        """Тест поиска узла по указателю"""
        parser = SpecParser()
        spec = parser.parse_spec(FIXTURE)

        error = parser.resolve_ref(spec, "#/components/schemas/Error")

        assert error["required"] == ["message"]
        assert parser.resolve_ref(spec, "#/components/schemas/Missing") is None
        assert parser.resolve_ref({"a": {"b": 1}}, "#/a/b") == 1

    def test_parsed_spec_resource_name(self):
        """Тест имени ресурса разобранной спецификации"""
        spec = ParsedSpec(resolved={}, original={}, path="specs/catalog.openapi.json")
        assert spec.resource_name == "catalog"
