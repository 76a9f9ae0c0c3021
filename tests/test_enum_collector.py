"""
Тесты сбора enum-ов
"""

from openapi_nest.internal.generator.enum_collector import EnumCollector
from openapi_nest.internal.types.schema_resolver import ReferenceResolver


class TestEnumCollector:
    """Тесты EnumCollector"""

    def test_same_property_name_collapses(self):
        """Тест что одноименные свойства дают один enum, побеждает первый"""
        collector = EnumCollector()
        collector.collect(
            {"properties": {"status": {"type": "string", "enum": ["A", "B"]}}}
        )
        collector.collect(
            {"properties": {"status": {"type": "string", "enum": ["C"]}}}
        )

        assert len(collector.enums) == 1
        assert collector.enums[0].name == "StatusEnum"
        assert [v.value for v in collector.enums[0].values] == ["A", "B"]

    def test_nested_and_array_enums(self):
        """Тест enum-ов во вложенных объектах и элементах массива"""
        collector = EnumCollector()
        enums = collector.collect(
            {
                "properties": {
                    "profile": {
                        "type": "object",
                        "properties": {"level": {"type": "string", "enum": ["low", "high"]}},
                    },
                    "roles": {
                        "type": "array",
                        "items": {"type": "string", "enum": ["admin", "guest"]},
                    },
                }
            }
        )

        assert [e.name for e in enums] == ["LevelEnum", "RolesEnum"]
        assert [v.key for v in enums[1].values] == ["ADMIN", "GUEST"]

    def test_visited_guard(self):
        """Тест что циклическая схема обходится один раз"""
        document = {
            "components": {
                "schemas": {
                    "Node": {
                        "type": "object",
                        "properties": {
                            "kind": {"type": "string", "enum": ["leaf"]},
                            "next": {"$ref": "#/components/schemas/Node"},
                        },
                    }
                }
            }
        }
        collector = EnumCollector(ReferenceResolver(document))

        enums = collector.collect(document["components"]["schemas"]["Node"])

        assert [e.name for e in enums] == ["KindEnum"]

    def test_enum_component_reference(self):
        """Тест что ссылка на enum-компонент не порождает enum по имени свойства"""
        document = {
            "components": {
                "schemas": {"Status": {"type": "string", "enum": ["on", "off"]}}
            }
        }
        collector = EnumCollector(ReferenceResolver(document))

        enums = collector.collect(
            {"properties": {"state": {"$ref": "#/components/schemas/Status"}}}
        )

        assert enums == []

    def test_add_first_wins(self):
        """Тест явного добавления enum-а"""
        collector = EnumCollector()

        collector.add("ColorEnum", ["red"])
        collector.add("ColorEnum", ["blue"])
        collector.add("EmptyEnum", [])

        assert [e.name for e in collector.enums] == ["ColorEnum"]
        assert collector.enums[0].values[0].value == "red"
