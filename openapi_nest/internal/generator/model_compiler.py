from typing import Any, Dict, Iterable, List, Set, Tuple

from ..errors import MissingSchemaError, RefNotFound
from ..types.models import (
    MappingContext,
    ModelBatch,
    ModelDescriptor,
    PropertyDescriptor,
)
from ..types.schema_resolver import (
    SCHEMAS_PREFIX,
    ReferenceResolver,
    SchemaNameResolver,
)
from ..utils.naming import enum_name
from .dependency_orderer import DependencyOrderer
from .enum_collector import EnumCollector
from .registry import ModelRegistry
from .type_mapper import TypeMapper, component_schemas, is_model_schema, is_string_enum


class ModelCompiler:
    """
    Компиляция схем документа в дескрипторы моделей.

    Работает на исходном (не разыменованном) документе, чтобы $ref
    сохраняли символьные имена. Очередь моделей обрабатывается до
    неподвижной точки; каждый вызов compile_all независим.
    """

    def __init__(self, document: Dict[str, Any], strict: bool = False, spec_path: str = None):
        self.document = document
        self.strict = strict
        self.spec_path = spec_path
        self.resolver = ReferenceResolver(document, spec_path)
        self.names = SchemaNameResolver(component_schemas(document))

    def compile_all(self, extra_roots: Iterable[Tuple[str, Any]] = ()) -> ModelBatch:
        """
        Компиляция всех моделей документа.

        Args:
            extra_roots: Дополнительные пары (имя модели, схема), например
                синтезированные DTO ответов

        Returns:
            ModelBatch с моделями в порядке зависимостей, enum-ами и именами
            пропущенных моделей без схемы
        """
        registry = ModelRegistry()
        mapper = TypeMapper(self.document, self.resolver, registry, self.names)
        collector = EnumCollector(self.resolver)

        for schema_name, schema in component_schemas(self.document).items():
            if is_string_enum(schema):
                collector.add(enum_name(schema_name), list(schema["enum"]))
            elif is_model_schema(schema):
                registry.register(
                    self.names.resolve_schema_name(schema_name),
                    schema=schema,
                    pointer=f"{SCHEMAS_PREFIX}{schema_name}",
                )

        for model_name, schema in extra_roots:
            registry.register(model_name, schema=schema, source="response")

        compiled: Dict[str, ModelDescriptor] = {}
        schemas: Dict[str, Any] = {}
        sources: Dict[str, str] = {}
        skipped: List[str] = []

        entry = registry.pop()
        while entry is not None:
            if entry.name not in compiled and entry.name not in skipped:
                schema = entry.schema
                if schema is None and entry.pointer:
                    schema = self.resolver.find(entry.pointer)

                if not hasattr(schema, "get"):
                    if self.strict:
                        raise MissingSchemaError(entry.name, self.spec_path)
                    skipped.append(entry.name)
                else:
                    schemas[entry.name] = schema
                    sources[entry.name] = entry.source
                    compiled[entry.name] = self.compile_model(
                        entry.name, schema, mapper, source=entry.source
                    )
            entry = registry.pop()

        ordered = self._break_cycles(compiled, schemas, sources, set(skipped), mapper)

        for schema in schemas.values():
            collector.collect(schema)

        return ModelBatch(models=ordered, enums=collector.enums, skipped=skipped)

    def compile_model(
        self,
        model_name: str,
        schema: Any,
        mapper: TypeMapper,
        blocked: Set[str] = None,
        source: str = "component",
    ) -> ModelDescriptor:
        """Компиляция одной модели; новые модели попадают в очередь реестра"""
        properties, required = self._collect_properties(schema)
        base_name = SchemaNameResolver.base_name(model_name)
        dependencies: List[str] = []
        blocked = blocked or set()

        descriptors = []
        for prop_name, prop_schema in properties.items():
            context = MappingContext(
                model_name=model_name,
                base_name=base_name,
                property_name=prop_name,
                dependencies=dependencies,
                blocked=blocked,
            )
            mapped = mapper.map_property(prop_schema, context)
            documented = self._documented(prop_schema)

            descriptors.append(
                PropertyDescriptor(
                    name=prop_name,
                    required=prop_name in required,
                    type_expression=mapped.type_expression,
                    constraints=mapped.constraints,
                    description=documented.get("description"),
                    example=documented.get("example"),
                    enum_values=mapped.enum_values,
                    is_array=mapped.is_array,
                    item_type=mapped.item_type,
                )
            )

        return ModelDescriptor(
            name=model_name,
            properties=descriptors,
            depends_on=dependencies,
            source=source,
            description=schema.get("description"),
        )

    def _break_cycles(
        self,
        compiled: Dict[str, ModelDescriptor],
        schemas: Dict[str, Any],
        sources: Dict[str, str],
        skipped: Set[str],
        mapper: TypeMapper,
    ) -> List[ModelDescriptor]:
        """
        Блокировка ребер на пропущенные модели и ребер, замыкающих цикл.

        Затронутые модели перекомпилируются с заблокированными именами, эти
        свойства получают тип any. Повторяется пока обход находит циклы.
        """
        blocked: Dict[str, Set[str]] = {name: set() for name in compiled}

        def recompile(names):
            for name in names:
                compiled[name] = self.compile_model(
                    name, schemas[name], mapper, blocked[name], sources[name]
                )

        dangling = []
        for name, model in compiled.items():
            missing = set(model.depends_on) & skipped
            if missing:
                blocked[name] |= missing
                dangling.append(name)
        recompile(dangling)

        while True:
            orderer = DependencyOrderer(list(compiled.values()))
            ordered = orderer.order()
            if not orderer.back_edges:
                return ordered

            affected = []
            for source_name, target_name in orderer.back_edges:
                blocked[source_name].add(target_name)
                if source_name not in affected:
                    affected.append(source_name)
            recompile(affected)

    def _collect_properties(self, schema: Any) -> Tuple[Dict[str, Any], Set[str]]:
        """Свойства и required модели, с учетом членов allOf"""
        properties: Dict[str, Any] = {}
        required: Set[str] = set()
        seen = set()

        def merge(node):
            node = self._deref(node)
            if not hasattr(node, "get") or id(node) in seen:
                return
            seen.add(id(node))

            for member in node.get("allOf") or []:
                merge(member)

            for prop_name, prop_schema in (node.get("properties") or {}).items():
                properties[prop_name] = prop_schema
            required.update(node.get("required") or [])

        merge(schema)
        return properties, required

    @staticmethod
    def _documented(schema: Any) -> Any:
        """Описание и пример берутся только с самого узла свойства"""
        return schema if hasattr(schema, "get") else {}

    def _deref(self, node: Any) -> Any:
        try:
            return self.resolver.deref(node)
        except RefNotFound:
            return None
