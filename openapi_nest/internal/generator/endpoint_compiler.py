import re
from typing import Any, Dict, List, Optional, Tuple

from ..errors import RefNotFound
from ..types.models import (
    PRIMITIVE_TYPES,
    BodyDescriptor,
    EndpointDescriptor,
    ParameterDescriptor,
    ResponseDescriptor,
)
from ..types.schema_resolver import (
    SCHEMAS_PREFIX,
    ReferenceResolver,
    SchemaNameResolver,
    is_ref,
)
from ..utils.naming import capitalize, header_to_identifier, operation_name_from_path
from .registry import ModelRegistry
from .type_mapper import TypeMapper, component_schemas, schema_type

HTTP_METHODS = ("get", "post", "put", "patch", "delete")
JSON_MEDIA_TYPE = "application/json"

PARAMETER_PRIORITY = {
    "path": 1,
    "body": 2,
    "query": 3,
    "header": 4,
}
OTHER_PRIORITY = 5


def order_parameters(parameters: List[ParameterDescriptor]) -> List[ParameterDescriptor]:
    """
    Порядок аргументов метода: сначала обязательные, затем по виду
    (path, body, query, header, прочие), затем по имени.

    Сортировка стабильная, одинаковые ключи сохраняют исходный порядок.
    """
    return sorted(
        parameters,
        key=lambda p: (
            not p.required,
            PARAMETER_PRIORITY.get(p.kind, OTHER_PRIORITY),
            p.name.casefold(),
        ),
    )


def json_schema(content: Any) -> Optional[Any]:
    """Схема JSON контента: application/json, иначе первый *json* тип"""
    if not hasattr(content, "get"):
        return None

    media = content.get(JSON_MEDIA_TYPE)
    if media is None:
        media = next(
            (value for key, value in content.items() if "json" in key.lower()), None
        )

    if not hasattr(media, "get"):
        return None
    return media.get("schema")


def is_inline_response_object(schema: Any) -> bool:
    """Инлайн объект ответа, для которого синтезируется DTO"""
    if not hasattr(schema, "get") or is_ref(schema):
        return False
    if schema_type(schema) == "object":
        return "properties" in schema or not schema.get("additionalProperties")
    return schema_type(schema) is None and "properties" in schema


def union_members(type_expression: str) -> List[str]:
    """Имена типов из выражения: объединения и массивы раскрываются"""
    members = []
    for part in type_expression.split(" | "):
        name = re.sub(r"[()\[\]]", "", part).strip()
        if name and name not in members:
            members.append(name)
    return members


def dto_imports(endpoints: List[EndpointDescriptor]) -> List[str]:
    """Отсортированный список DTO/enum имен, используемых эндпоинтами"""
    imports = set()
    for endpoint in endpoints:
        expressions = [endpoint.return_type]
        expressions.extend(response.type_expression for response in endpoint.responses)
        if endpoint.body:
            expressions.append(endpoint.body.type_expression)

        for expression in expressions:
            for name in union_members(expression):
                if name not in PRIMITIVE_TYPES and not name.startswith("Record<"):
                    imports.add(name)

    return sorted(imports)


def _status_key(status: str) -> Tuple[int, Any]:
    return (0, int(status)) if status.isdigit() else (1, status)


class EndpointCompiler:
    """
    Компиляция операций OpenAPI в дескрипторы эндпоинтов.

    Оба документа обязательны: разыменованный задает перечень операций, а
    исходный позволяет восстановить имена схем по $ref.
    """

    def __init__(
        self,
        resolved_document: Dict[str, Any],
        original_document: Dict[str, Any],
        include_error_types: bool = False,
        synthesize_response_dtos: bool = True,
        spec_path: str = None,
    ):
        self.resolved_document = resolved_document
        self.original_document = original_document
        self.include_error_types = include_error_types
        self.synthesize_response_dtos = synthesize_response_dtos

        self.resolver = ReferenceResolver(original_document, spec_path)
        self.names = SchemaNameResolver(component_schemas(original_document))
        self.mapper = TypeMapper(original_document, self.resolver, ModelRegistry(), self.names)

        self.response_models: List[Tuple[str, Any]] = []
        self._response_names = self._new_name_arena()

    def compile_all(self) -> List[EndpointDescriptor]:
        """Все операции документа в порядке путей и методов"""
        self.response_models = []
        self._response_names = self._new_name_arena()

        endpoints = []
        for path, path_item in (self.resolved_document.get("paths") or {}).items():
            if not hasattr(path_item, "get"):
                continue
            for method in HTTP_METHODS:
                operation = path_item.get(method)
                if hasattr(operation, "get"):
                    endpoints.append(self.compile(method, path, operation))

        return endpoints

    def compile(self, method: str, path: str, operation: Dict[str, Any]) -> EndpointDescriptor:
        """Дескриптор одной операции"""
        source, path_item = self._source_operation(method, path, operation)
        operation_name = source.get("operationId") or operation_name_from_path(method, path)

        parameters = self._compile_parameters(path_item, source)
        body = self._compile_body(source.get("requestBody"))

        arguments = list(parameters)
        if body is not None:
            arguments.append(
                ParameterDescriptor(
                    name="body",
                    wire_name="body",
                    kind="body",
                    required=True,
                    type_expression=body.type_expression,
                    description=body.description,
                )
            )

        responses = self._compile_responses(operation_name, source.get("responses") or {})

        return EndpointDescriptor(
            http_method=method,
            path=path if path.startswith("/") else f"/{path}",
            operation_name=operation_name,
            summary=source.get("summary"),
            description=source.get("description"),
            deprecated=bool(source.get("deprecated", False)),
            tags=list(source.get("tags") or []),
            parameters=parameters,
            body=body,
            arguments=order_parameters(arguments),
            responses=responses,
            return_type=self.return_type(responses),
            force_status_code=self.force_status_code(responses),
        )

    def return_type(self, responses: List[ResponseDescriptor]) -> str:
        """
        Тип возвращаемого значения.

        Учитываются 2xx ответы (или все, если include_error_types). void и
        any отбрасываются, остальное объединяется через ' | ' в порядке
        статусов.
        """
        considered = [
            r for r in responses if self.include_error_types or r.is_success
        ]
        if not considered:
            return "void"

        types = []
        for response in considered:
            if response.type_expression in ("void", "any"):
                continue
            if response.type_expression not in types:
                types.append(response.type_expression)

        if not types:
            has_content = any(r.type_expression != "void" for r in considered)
            return "any" if has_content else "void"

        return " | ".join(types)

    @staticmethod
    def force_status_code(responses: List[ResponseDescriptor]) -> Optional[int]:
        """Явный HTTP статус, если первый успешный ответ не 200/201"""
        success = next((r for r in responses if r.is_success), None)
        if success is None or success.status_code in (None, 200, 201):
            return None
        return success.status_code

    # --- части операции ---

    def _source_operation(self, method: str, path: str, operation: Dict[str, Any]):
        """
        Операция из исходного документа по (path, method), иначе переданная.

        Path item может сам быть $ref (components/pathItems), тогда операция
        и параметры пути берутся из цели ссылки.
        """
        original_item = self._deref(self._path_item(self.original_document, path))
        if hasattr(original_item, "get") and hasattr(original_item.get(method), "get"):
            return original_item[method], original_item

        return operation, self._path_item(self.resolved_document, path) or {}

    def _compile_parameters(self, path_item: Any, operation: Any) -> List[ParameterDescriptor]:
        merged: Dict[Tuple[str, str], Any] = {}
        for parameter in list(path_item.get("parameters") or []) + list(
            operation.get("parameters") or []
        ):
            parameter = self._deref(parameter)
            if not hasattr(parameter, "get") or not parameter.get("name"):
                continue
            merged[(parameter["name"], parameter.get("in"))] = parameter

        return [self._compile_parameter(parameter) for parameter in merged.values()]

    def _compile_parameter(self, parameter: Any) -> ParameterDescriptor:
        wire_name = parameter["name"]
        kind = parameter.get("in") or "query"
        schema = self._deref(parameter.get("schema"))

        return ParameterDescriptor(
            name=header_to_identifier(wire_name) if kind == "header" else wire_name,
            wire_name=wire_name,
            kind=kind,
            required=kind == "path" or parameter.get("required") is True,
            type_expression=self._parameter_type(schema),
            constraint_schema=self._shallow(schema),
            description=parameter.get("description"),
        )

    def _parameter_type(self, schema: Any) -> str:
        if not hasattr(schema, "get"):
            return "string"

        value_type = schema_type(schema) or "string"
        if value_type == "integer":
            return "number"
        if value_type == "array":
            items = self._deref(schema.get("items"))
            return f"{self._parameter_type(items) if items is not None else 'any'}[]"
        if value_type in ("string", "number", "boolean", "object"):
            return value_type
        return "string"

    def _compile_body(self, request_body: Any) -> Optional[BodyDescriptor]:
        request_body = self._deref(request_body)
        if not hasattr(request_body, "get"):
            return None

        schema = json_schema(request_body.get("content"))
        if schema is None:
            return None

        return BodyDescriptor(
            type_expression=self.mapper.map_body(schema),
            required=True,
            description=request_body.get("description"),
        )

    def _compile_responses(self, operation_name: str, responses: Any) -> List[ResponseDescriptor]:
        entries = []
        for status, response in responses.items():
            response = self._deref(response)
            if not hasattr(response, "get"):
                continue
            entries.append((str(status), response, json_schema(response.get("content"))))

        entries.sort(key=lambda entry: _status_key(entry[0]))

        inline_count = sum(1 for _, _, schema in entries if is_inline_response_object(schema))

        descriptors = []
        for status, response, schema in entries:
            inline = False
            if schema is None:
                type_expression = "void"
            elif self.synthesize_response_dtos and is_inline_response_object(schema):
                base_name = f"{capitalize(operation_name)}{status if inline_count > 1 else ''}Response"
                type_expression = self._claim_response_model(base_name, schema)
                inline = True
            else:
                type_expression = self.mapper.map_body(schema)

            descriptors.append(
                ResponseDescriptor(
                    status=status,
                    type_expression=type_expression,
                    description=response.get("description"),
                    inline=inline,
                )
            )

        return descriptors

    def _claim_response_model(self, base_name: str, schema: Any) -> str:
        model_name = self._response_names.claim(base_name, schema, source="response")
        if self.names.original_name(model_name) is None and all(
            name != model_name for name, _ in self.response_models
        ):
            self.response_models.append((model_name, schema))
        return model_name

    # --- утилиты ---

    def _new_name_arena(self) -> ModelRegistry:
        arena = ModelRegistry()
        for schema_name, schema in component_schemas(self.original_document).items():
            arena.register(
                self.names.resolve_schema_name(schema_name),
                schema=schema,
                pointer=f"{SCHEMAS_PREFIX}{schema_name}",
            )
        return arena

    @staticmethod
    def _path_item(document: Dict[str, Any], path: str) -> Optional[Any]:
        item = (document.get("paths") or {}).get(path)
        return item if hasattr(item, "get") else None

    def _deref(self, node: Any) -> Any:
        try:
            return self.resolver.deref(node)
        except RefNotFound:
            return None

    @staticmethod
    def _shallow(schema: Any) -> Dict[str, Any]:
        """Скалярные ключи схемы параметра в виде обычного словаря"""
        if not hasattr(schema, "items"):
            return {}
        return {
            key: value
            for key, value in schema.items()
            if isinstance(value, (str, int, float, bool))
        }
