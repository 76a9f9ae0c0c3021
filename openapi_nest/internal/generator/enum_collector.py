from typing import Any, Dict, List, Optional

from ..errors import RefNotFound
from ..types.models import EnumDescriptor, EnumValue
from ..types.schema_resolver import ReferenceResolver, is_ref
from ..utils.naming import enum_key, enum_name
from .type_mapper import is_string_enum, schema_type


class EnumCollector:
    """
    Сбор строковых enum-ов из дерева свойств схемы.

    Имя enum-а берется из имени свойства (status -> StatusEnum), поэтому
    одноименные свойства с разными наборами значений схлопываются в один
    enum: побеждает первый найденный.
    """

    def __init__(self, resolver: ReferenceResolver = None):
        self.resolver = resolver
        self._enums: Dict[str, EnumDescriptor] = {}
        self._visited = set()

    @property
    def enums(self) -> List[EnumDescriptor]:
        return list(self._enums.values())

    def collect(self, schema: Any) -> List[EnumDescriptor]:
        """Обход схемы; возвращает все собранные к этому моменту enum-ы"""
        self._walk(schema)
        return self.enums

    def add(self, name: str, values: List[Any]) -> Optional[EnumDescriptor]:
        """Добавление enum-а по имени, если такого еще нет"""
        if name in self._enums or not values:
            return self._enums.get(name)

        descriptor = EnumDescriptor(
            name=name,
            values=[EnumValue(key=enum_key(value), value=value) for value in values],
        )
        self._enums[name] = descriptor
        return descriptor

    def _walk(self, schema: Any):
        schema = self._deref(schema)
        if not hasattr(schema, "get") or id(schema) in self._visited:
            return
        self._visited.add(id(schema))

        for member in schema.get("allOf") or []:
            self._walk(member)

        for prop_name, prop_schema in (schema.get("properties") or {}).items():
            if is_ref(prop_schema):
                # enum-компоненты именуются по компоненту, а не по свойству
                self._walk(prop_schema)
                continue
            if not hasattr(prop_schema, "get"):
                continue

            if is_string_enum(prop_schema):
                self.add(enum_name(prop_name), list(prop_schema["enum"]))
            elif schema_type(prop_schema) == "array":
                items = prop_schema.get("items")
                if not is_ref(items) and hasattr(items, "get") and is_string_enum(items):
                    self.add(enum_name(prop_name), list(items["enum"]))
                else:
                    self._walk(items)
            else:
                self._walk(prop_schema)

    def _deref(self, schema: Any) -> Any:
        if not is_ref(schema):
            return schema
        if self.resolver is None:
            return None
        try:
            return self.resolver.deref(schema)
        except RefNotFound:
            return None
