from typing import Any, Dict, Optional

from ..errors import RefNotFound

SCHEMAS_PREFIX = "#/components/schemas/"
DTO_SUFFIX = "Dto"


def ref_name(pointer: str) -> str:
    """Символьное имя из указателя: последний сегмент"""
    return _unescape(pointer.rstrip("/").split("/")[-1])


def is_ref(node: Any) -> bool:
    return hasattr(node, "get") and isinstance(node.get("$ref"), str)


def _unescape(segment: str) -> str:
    return segment.replace("~1", "/").replace("~0", "~")


class ReferenceResolver:
    """Резолвер $ref указателей внутри одного документа"""

    def __init__(self, document: Dict[str, Any], spec_path: str = None):
        self.document = document
        self.spec_path = spec_path

    def resolve(self, pointer: str) -> Any:
        """Проход по документу по сегментам указателя"""
        if not isinstance(pointer, str) or not pointer.startswith("#"):
            raise RefNotFound(str(pointer), self.spec_path)

        node = self.document
        for segment in pointer[1:].split("/"):
            if not segment:
                continue
            segment = _unescape(segment)

            if isinstance(node, list):
                if not segment.isdigit() or int(segment) >= len(node):
                    raise RefNotFound(pointer, self.spec_path)
                node = node[int(segment)]
            elif hasattr(node, "get") and segment in node:
                node = node[segment]
            else:
                raise RefNotFound(pointer, self.spec_path)

        return node

    def find(self, pointer: str) -> Optional[Any]:
        """То же что resolve, но None вместо исключения"""
        try:
            return self.resolve(pointer)
        except RefNotFound:
            return None

    def deref(self, node: Any) -> Any:
        """Разворачивает цепочку $ref до конкретного узла"""
        seen = set()
        while is_ref(node):
            pointer = node["$ref"]
            if pointer in seen:
                raise RefNotFound(pointer, self.spec_path)
            seen.add(pointer)
            node = self.resolve(pointer)
        return node


class SchemaNameResolver:
    """Реестр имен моделей для консистентности"""

    def __init__(self, schemas: Dict[str, Any] = None):
        self._schema_registry = {}
        for schema_name in schemas or {}:
            self.register_schema(schema_name, self.dto_name(schema_name))

    def register_schema(self, original_name: str, clean_name: str):
        """Регистрация схемы с именем класса"""
        self._schema_registry[original_name] = clean_name

    def resolve_schema_name(self, original_name: str) -> str:
        """Имя класса для схемы"""
        if original_name in self._schema_registry:
            return self._schema_registry[original_name]
        return self.dto_name(original_name)

    def original_name(self, clean_name: str) -> Optional[str]:
        for original, registered in self._schema_registry.items():
            if registered == clean_name:
                return original
        return None

    @staticmethod
    def dto_name(base_name: str) -> str:
        return f"{base_name}{DTO_SUFFIX}"

    @staticmethod
    def base_name(model_name: str) -> str:
        if model_name.endswith(DTO_SUFFIX) and len(model_name) > len(DTO_SUFFIX):
            return model_name[: -len(DTO_SUFFIX)]
        return model_name
