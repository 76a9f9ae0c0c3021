from typing import Any, Dict, List, Optional

from ..errors import RefNotFound
from ..types.models import MappedType, MappingContext, ValidationConstraint
from ..types.schema_resolver import (
    SCHEMAS_PREFIX,
    ReferenceResolver,
    SchemaNameResolver,
    is_ref,
    ref_name,
)
from ..utils.naming import capitalize, enum_name
from .registry import ModelRegistry

PRIMITIVES = {
    "string": "string",
    "number": "number",
    "integer": "number",
    "boolean": "boolean",
}


def component_schemas(document: Dict[str, Any]) -> Dict[str, Any]:
    return (document.get("components") or {}).get("schemas") or {}


def schema_type(schema: Any) -> Optional[str]:
    """Тип схемы; для OpenAPI 3.1 списков берется первый не-null"""
    if not hasattr(schema, "get"):
        return None
    value = schema.get("type")
    if isinstance(value, list):
        value = next((t for t in value if t != "null"), None)
    return value


def is_inline_object(schema: Any) -> bool:
    return (
        hasattr(schema, "get")
        and not is_ref(schema)
        and bool(schema.get("properties"))
        and schema_type(schema) in (None, "object")
    )


def is_string_enum(schema: Any) -> bool:
    return schema_type(schema) == "string" and bool(schema.get("enum"))


def is_model_schema(schema: Any) -> bool:
    """Схема превращается в класс DTO (а не в алиас примитива или enum)"""
    if not hasattr(schema, "get") or is_ref(schema):
        return False
    return (
        schema_type(schema) == "object"
        or "properties" in schema
        or "allOf" in schema
    )


def is_component_pointer(pointer: str) -> bool:
    """Ссылка ровно на компонент: #/components/schemas/<Name>"""
    return pointer.startswith(SCHEMAS_PREFIX) and "/" not in pointer[len(SCHEMAS_PREFIX) :]


def nested(type_name: str, each: bool = False) -> List[ValidationConstraint]:
    return [
        ValidationConstraint(kind="nested", value="each" if each else None),
        ValidationConstraint(kind="type", value=type_name),
    ]


class TypeMapper:
    """Маппинг схем OpenAPI в TypeScript типы и теги валидации"""

    def __init__(
        self,
        document: Dict[str, Any],
        resolver: ReferenceResolver = None,
        registry: ModelRegistry = None,
        names: SchemaNameResolver = None,
    ):
        self.document = document
        self.resolver = resolver or ReferenceResolver(document)
        self.registry = registry if registry is not None else ModelRegistry()
        self.names = names or SchemaNameResolver(component_schemas(document))
        self._alias_stack = set()

    # --- свойства моделей ---

    def map_property(self, schema: Any, context: MappingContext) -> MappedType:
        """Тип свойства модели; новые модели регистрируются в реестре"""
        if not hasattr(schema, "get"):
            return MappedType("any")

        if is_ref(schema):
            return self._map_reference(schema["$ref"], context)

        all_of = schema.get("allOf")
        if isinstance(all_of, list) and len(all_of) == 1:
            return self.map_property(all_of[0], context)

        variants = schema.get("oneOf") or schema.get("anyOf")
        if isinstance(variants, list) and variants:
            return self._map_union(variants, context)

        value_type = schema_type(schema)

        if value_type == "array":
            return self._map_array(schema, context)

        if is_inline_object(schema):
            return self._map_inline_object(schema, context)

        if value_type == "string":
            return self._map_string(schema, context)

        if value_type in ("number", "integer"):
            return self._map_number(schema, value_type)

        if value_type == "boolean":
            return MappedType("boolean", [ValidationConstraint(kind="boolean")])

        if value_type == "object":
            return self._map_free_object(schema, context)

        return MappedType("any")

    def _map_reference(self, pointer: str, context: MappingContext) -> MappedType:
        target = self.resolver.find(pointer)

        if target is not None and not is_model_schema(target):
            return self._map_alias(pointer, target, context)

        if is_component_pointer(pointer):
            # Ссылка на компонент: имя известно и без схемы, отсутствие
            # обработает компилятор моделей
            model_name = self.names.resolve_schema_name(ref_name(pointer))
            blocked = self._is_blocked(model_name, context)
            if not blocked:
                self.registry.register(model_name, schema=target, pointer=pointer)
        elif target is None:
            return MappedType("any")
        else:
            model_name = self.registry.claim(
                capitalize(ref_name(pointer)), target, source="reference"
            )
            blocked = self._is_blocked(model_name, context)

        if blocked:
            return MappedType("any")

        context.add_dependency(model_name)
        return MappedType(model_name, nested(model_name))

    def _map_alias(self, pointer: str, target: Any, context: MappingContext) -> MappedType:
        """Ссылка на enum или примитив: тип разворачивается на месте"""
        if is_string_enum(target):
            name = enum_name(ref_name(pointer))
            return MappedType(
                name,
                [
                    ValidationConstraint(kind="string"),
                    ValidationConstraint(kind="enum", value=name),
                ],
                enum_values=list(target["enum"]),
            )

        if pointer in self._alias_stack:
            return MappedType("any")

        self._alias_stack.add(pointer)
        try:
            return self.map_property(target, context)
        finally:
            self._alias_stack.discard(pointer)

    def _map_union(self, variants: List[Any], context: MappingContext) -> MappedType:
        mapped = []
        for variant in variants:
            if schema_type(variant) == "null":
                continue
            mapped.append(self.map_property(variant, context))

        if len(mapped) == 1:
            return mapped[0]

        type_names = []
        for item in mapped:
            if item.type_expression not in type_names:
                type_names.append(item.type_expression)

        if not type_names:
            return MappedType("any")
        if len(type_names) == 1:
            return mapped[0]
        return MappedType(" | ".join(type_names))

    def _map_array(self, schema: Any, context: MappingContext) -> MappedType:
        constraints = [ValidationConstraint(kind="array")]
        items = schema.get("items")

        if not hasattr(items, "get"):
            return MappedType("any[]", constraints, item_type="any")

        if is_inline_object(items):
            item_model = self._synthesize(items, context, suffix="Item")
            if item_model == "any":
                return MappedType("any[]", constraints, item_type="any")
            constraints.extend(nested(item_model, each=True))
            return MappedType(f"{item_model}[]", constraints, item_type=item_model)

        item = self.map_property(items, context)
        item_type = item.type_expression
        if any(c.kind == "nested" for c in item.constraints):
            constraints.extend(nested(item_type, each=True))

        array_type = f"({item_type})[]" if " | " in item_type else f"{item_type}[]"
        return MappedType(array_type, constraints, item_type=item_type)

    def _map_inline_object(self, schema: Any, context: MappingContext) -> MappedType:
        match = self.find_structural_match(schema)
        if match is not None:
            model_name = self.names.resolve_schema_name(match)
            if self._is_blocked(model_name, context):
                return MappedType("any")
            self.registry.register(
                model_name,
                schema=component_schemas(self.document)[match],
                pointer=f"{SCHEMAS_PREFIX}{match}",
            )
            context.add_dependency(model_name)
            return MappedType(model_name, nested(model_name))

        model_name = self._synthesize(schema, context)
        if model_name == "any":
            return MappedType("any")
        return MappedType(model_name, nested(model_name))

    def _synthesize(self, schema: Any, context: MappingContext, suffix: str = "") -> str:
        base_name = f"{context.base_name}{capitalize(context.property_name)}{suffix}"
        model_name = self.registry.claim(base_name, schema)
        if self._is_blocked(model_name, context):
            return "any"
        context.add_dependency(model_name)
        return model_name

    def _map_string(self, schema: Any, context: MappingContext) -> MappedType:
        constraints = [ValidationConstraint(kind="string")]
        enum_values = []

        if schema.get("format") == "email":
            constraints.append(ValidationConstraint(kind="email"))

        if schema.get("enum"):
            enum_values = list(schema["enum"])
            constraints.append(
                ValidationConstraint(kind="enum", value=enum_name(context.property_name))
            )

        if schema.get("minLength") is not None:
            constraints.append(ValidationConstraint(kind="min_length", value=schema["minLength"]))

        if schema.get("maxLength") is not None:
            constraints.append(ValidationConstraint(kind="max_length", value=schema["maxLength"]))

        if schema.get("pattern"):
            constraints.append(ValidationConstraint(kind="pattern", value=schema["pattern"]))

        return MappedType("string", constraints, enum_values=enum_values)

    @staticmethod
    def _map_number(schema: Any, value_type: str) -> MappedType:
        constraints = [ValidationConstraint(kind="int" if value_type == "integer" else "number")]

        if schema.get("minimum") is not None:
            constraints.append(ValidationConstraint(kind="min", value=schema["minimum"]))

        if schema.get("maximum") is not None:
            constraints.append(ValidationConstraint(kind="max", value=schema["maximum"]))

        return MappedType("number", constraints)

    def _map_free_object(self, schema: Any, context: MappingContext) -> MappedType:
        additional = schema.get("additionalProperties")
        if hasattr(additional, "get") and additional:
            value = self.map_property(additional, context)
            return MappedType(f"Record<string, {value.type_expression}>")
        return MappedType("object")

    # --- тела запросов и ответов ---

    def map_body(self, schema: Any) -> str:
        """
        Тип тела запроса/ответа. Правила те же что и для свойств, но инлайн
        объекты не порождают новых моделей и становятся any.

        То же касается ссылок внутрь схем (#/components/schemas/User/properties/address):
        в свойстве под такую ссылку заводится модель AddressDto, а тело
        получает any, так как модели тел в реестр компилятора не попадают.
        """
        if not hasattr(schema, "get"):
            return "any"

        if is_ref(schema):
            pointer = schema["$ref"]
            try:
                target = self.resolver.resolve(pointer)
            except RefNotFound:
                return "any"
            if is_string_enum(target):
                return enum_name(ref_name(pointer))
            if not is_model_schema(target):
                if pointer in self._alias_stack:
                    return "any"
                self._alias_stack.add(pointer)
                try:
                    return self.map_body(target)
                finally:
                    self._alias_stack.discard(pointer)
            if is_component_pointer(pointer):
                return self.names.resolve_schema_name(ref_name(pointer))
            return "any"

        value_type = schema_type(schema)

        if value_type == "array":
            items = schema.get("items")
            if not hasattr(items, "get") or is_inline_object(items):
                return "any[]"
            item_type = self.map_body(items)
            return f"({item_type})[]" if " | " in item_type else f"{item_type}[]"

        if value_type in PRIMITIVES:
            return PRIMITIVES[value_type]

        return "any"

    # --- структурное сравнение ---

    def find_structural_match(self, schema: Any) -> Optional[str]:
        """
        Поиск компонента с тем же набором имен свойств.

        Сравниваются только имена (без типов и ограничений), первый
        подходящий компонент в порядке документа.
        """
        property_names = set(schema.get("properties") or {})
        if not property_names:
            return None

        for name, component in component_schemas(self.document).items():
            if not hasattr(component, "get") or component is schema:
                continue
            if not component.get("properties"):
                continue
            if set(component["properties"]) == property_names:
                return name

        return None

    @staticmethod
    def _is_blocked(model_name: str, context: MappingContext) -> bool:
        return model_name == context.model_name or model_name in context.blocked
