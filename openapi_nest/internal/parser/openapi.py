import glob
import json
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import httpx
import jsonref
import yaml

from ..errors import SpecParseError
from ..types.schema_resolver import ReferenceResolver
from ..utils.naming import SPEC_EXTENSIONS, extract_resource_name

PARSE_ERROR_MESSAGE = "Failed to parse OpenAPI spec"


@dataclass
class ParsedSpec:
    """Спецификация в двух представлениях: разыменованном и исходном"""

    resolved: Dict[str, Any]
    original: Dict[str, Any]
    path: str

    @property
    def resource_name(self) -> str:
        return extract_resource_name(self.path)


class SpecParser:
    """Загрузка OpenAPI спецификаций из файлов и по URL"""

    def __init__(self, timeout: float = 30.0):
        self.timeout = timeout

    def find_specs(self, specs_dir: str) -> List[str]:
        """Файлы спецификаций в директории (рекурсивно, отсортированы)"""
        if not specs_dir or not os.path.isdir(specs_dir):
            return []

        found = set()
        for extension in SPEC_EXTENSIONS:
            pattern = os.path.join(specs_dir, "**", f"*{extension}")
            found.update(glob.glob(pattern, recursive=True))

        return sorted(path for path in found if os.path.isfile(path))

    def parse_spec(self, spec_path: str) -> ParsedSpec:
        """
        Загрузка и разыменование спецификации.

        Args:
            spec_path: Путь к .yaml/.yml/.json файлу или http(s) URL

        Returns:
            ParsedSpec с разыменованным (jsonref) и исходным документами

        Raises:
            SpecParseError: файл не читается, не парсится или не OpenAPI
        """
        try:
            text = self._read(spec_path)
            document = self._load(text, spec_path)
        except SpecParseError:
            raise
        except Exception as e:
            raise SpecParseError(f"{PARSE_ERROR_MESSAGE}: {e}", spec_path) from e

        if not isinstance(document, dict) or not (
            "openapi" in document or "swagger" in document
        ):
            raise SpecParseError(
                f"{PARSE_ERROR_MESSAGE}: документ не является OpenAPI спецификацией",
                spec_path,
            )

        # Исходный документ сохраняем до разрешения ссылок
        original = json.loads(json.dumps(document, default=str))
        resolved = jsonref.loads(json.dumps(document, default=str))

        return ParsedSpec(resolved=resolved, original=original, path=spec_path)

    def extract_resource_name(self, spec_path: str) -> str:
        return extract_resource_name(spec_path)

    def resolve_ref(self, spec: Union[ParsedSpec, Dict[str, Any]], pointer: str) -> Optional[Any]:
        """Узел исходного документа по $ref; None если не найден"""
        document = spec.original if isinstance(spec, ParsedSpec) else spec
        return ReferenceResolver(document).find(pointer)

    def _read(self, spec_path: str) -> str:
        if spec_path.startswith(("http://", "https://")):
            response = httpx.get(spec_path, timeout=self.timeout, follow_redirects=True)
            response.raise_for_status()
            return response.text

        with open(spec_path, "r", encoding="utf-8") as f:
            return f.read()

    @staticmethod
    def _load(text: str, spec_path: str) -> Any:
        if spec_path.lower().split("?")[0].endswith(".json"):
            return json.loads(text)
        return yaml.safe_load(text)
