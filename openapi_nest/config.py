"""
Конфигурация генератора NestJS кода
"""

import json
import os
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional

import toml

from .internal.errors import ConfigError

CONFIG_FILE = "openapi-gen.toml"
JSON_CONFIG_FILE = ".openapi-gen.json"

# Ключи конфигов в стиле JS версии генератора
CAMEL_CASE_KEYS = {
    "specsDir": "specs_dir",
    "outputDir": "output_dir",
    "templateDir": "template_dir",
    "generateControllers": "generate_controllers",
    "generateDtos": "generate_dtos",
    "generateServices": "generate_services",
    "includeErrorTypesInReturnType": "include_error_types_in_return_type",
    "synthesizeResponseDtos": "synthesize_response_dtos",
}


@dataclass
class GeneratorConfig:
    """Конфигурация генератора"""

    specs_dir: str = "./specs"
    output_dir: str = "./src/generated"
    generate_controllers: bool = True
    generate_dtos: bool = True
    generate_services: bool = False
    template_dir: Optional[str] = None
    include_error_types_in_return_type: bool = False
    synthesize_response_dtos: bool = True
    strict: bool = False

    @classmethod
    def from_file(
        cls, config_path: str = CONFIG_FILE, search_dir: str = None
    ) -> Optional["GeneratorConfig"]:
        """Загрузка конфигурации из файла (toml или json)"""
        if search_dir and os.path.isdir(search_dir):
            for name in (CONFIG_FILE, JSON_CONFIG_FILE):
                candidate = os.path.join(search_dir, name)
                if os.path.exists(candidate):
                    config_path = candidate
                    break

        if not os.path.exists(config_path) and config_path == CONFIG_FILE:
            if os.path.exists(JSON_CONFIG_FILE):
                config_path = JSON_CONFIG_FILE

        if not os.path.exists(config_path):
            return None

        try:
            if config_path.endswith(".json"):
                with open(config_path, "r", encoding="utf-8") as f:
                    config_data = json.load(f)
            else:
                config_data = toml.load(config_path)
        except (OSError, ValueError, toml.TomlDecodeError) as e:
            raise ConfigError(f"Некорректный файл конфигурации: {e}", config_path) from e

        if not isinstance(config_data, dict):
            raise ConfigError("Конфигурация должна быть объектом", config_path)

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> "GeneratorConfig":
        """Конфигурация из словаря; неизвестные ключи игнорируются"""
        data = dict(config_data)

        # generatorOptions из JS конфига поднимаются на верхний уровень
        options = data.pop("generatorOptions", None) or data.pop("generator_options", None)
        if isinstance(options, dict):
            data.update(options)

        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            key = CAMEL_CASE_KEYS.get(key, key)
            if key in known:
                values[key] = value

        return cls(**values)

    def save_to_file(self, config_path: str = CONFIG_FILE) -> None:
        """Сохранение конфигурации в файл"""
        config_data = {key: value for key, value in asdict(self).items() if value is not None}

        with open(config_path, "w") as f:
            toml.dump(config_data, f)

    def merge_with_args(self, args) -> "GeneratorConfig":
        """Объединение с аргументами командной строки"""
        values = asdict(self)
        if getattr(args, "specs", None):
            values["specs_dir"] = args.specs
        if getattr(args, "output", None):
            values["output_dir"] = args.output
        return GeneratorConfig(**values)
