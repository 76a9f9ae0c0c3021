"""
Главный модуль генератора - чистый интерфейс
"""

from typing import Any, Dict

from .config import GeneratorConfig
from .internal.generator.nest_generator import NestGenerator
from .internal.parser.openapi import ParsedSpec, SpecParser
from .internal.types.models import GenerationBatch, Project


class NestCodeGenerator:
    """Чистый интерфейс для генерации NestJS кода из спецификации"""

    def __init__(self, spec: ParsedSpec, config: GeneratorConfig = None):
        self.spec = spec
        self.generator = NestGenerator(
            spec.resolved,
            spec.original,
            spec.resource_name,
            config=config,
            spec_path=spec.path,
        )

    @classmethod
    def from_path(cls, spec_path: str, config: GeneratorConfig = None) -> "NestCodeGenerator":
        """Генератор для файла или URL спецификации"""
        return cls(SpecParser().parse_spec(spec_path), config)

    def build(self) -> GenerationBatch:
        """Дескрипторы моделей и эндпоинтов без рендера"""
        return self.generator.build()

    def generate(self, batch: GenerationBatch = None) -> Project:
        """Генерация файлов проекта"""
        return self.generator.generate(batch)


def generate_nest_code(
    resolved_document: Dict[str, Any],
    original_document: Dict[str, Any],
    resource_name: str,
    config: GeneratorConfig = None,
) -> Project:
    """Генерация NestJS файлов из уже загруженных документов"""
    generator = NestGenerator(resolved_document, original_document, resource_name, config)
    return generator.generate()
