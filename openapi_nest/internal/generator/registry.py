from collections import deque
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..types.schema_resolver import SchemaNameResolver


@dataclass
class RegistryEntry:
    """Модель в очереди на компиляцию"""

    name: str
    schema: Any = None
    pointer: Optional[str] = None
    source: str = "component"


class ModelRegistry:
    """Арена моделей одного прохода генерации: имя -> схема, плюс очередь"""

    def __init__(self):
        self._entries: Dict[str, RegistryEntry] = {}
        self._queue = deque()

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, name: str) -> Optional[RegistryEntry]:
        return self._entries.get(name)

    def register(
        self,
        name: str,
        schema: Any = None,
        pointer: str = None,
        source: str = "component",
    ) -> str:
        """Регистрирует модель и ставит в очередь; повторная регистрация ничего не меняет"""
        if name not in self._entries:
            entry = RegistryEntry(name=name, schema=schema, pointer=pointer, source=source)
            self._entries[name] = entry
            self._queue.append(entry)
        return name

    def claim(self, base_name: str, schema: Any, source: str = "inline") -> str:
        """
        Имя для синтезированной модели без коллизий.

        Если имя занято другой схемой, добавляется числовой суффикс:
        UserProfileDto -> UserProfile2Dto -> UserProfile3Dto.
        """
        candidate = SchemaNameResolver.dto_name(base_name)
        counter = 2
        while candidate in self._entries and not self._same_schema(
            self._entries[candidate].schema, schema
        ):
            candidate = SchemaNameResolver.dto_name(f"{base_name}{counter}")
            counter += 1

        return self.register(candidate, schema=schema, source=source)

    def pop(self) -> Optional[RegistryEntry]:
        return self._queue.popleft() if self._queue else None

    @staticmethod
    def _same_schema(left: Any, right: Any) -> bool:
        if left is None or right is None:
            return False
        return left is right or left == right
