"""Исключения генератора"""

from typing import Optional


class GeneratorError(Exception):
    """Базовое исключение генератора"""

    def __init__(self, message: str, spec_path: Optional[str] = None):
        self.spec_path = spec_path
        full_message = f"[{spec_path}] {message}" if spec_path else message
        super().__init__(full_message)


class SpecParseError(GeneratorError):
    """Спецификация не читается или не является OpenAPI документом"""


class RefNotFound(GeneratorError):
    """$ref указывает на несуществующий узел"""

    def __init__(self, ref: str, spec_path: Optional[str] = None):
        self.ref = ref
        super().__init__(f"Не удалось разрешить ссылку '{ref}'", spec_path)


class MissingSchemaError(GeneratorError):
    """Для модели из очереди не нашлось схемы (только строгий режим)"""

    def __init__(self, model_name: str, spec_path: Optional[str] = None):
        self.model_name = model_name
        super().__init__(f"Нет схемы для модели '{model_name}'", spec_path)


class TemplateMissing(GeneratorError):
    """Шаблон не найден ни в пользовательской директории, ни среди встроенных"""

    def __init__(self, template_id: str, template_dir: Optional[str] = None):
        self.template_id = template_id
        self.template_dir = template_dir
        location = f" (директория {template_dir})" if template_dir else ""
        super().__init__(f"Шаблон '{template_id}' не найден{location}")


class ConfigError(GeneratorError):
    """Ошибка чтения файла конфигурации"""
