"""Утилиты для построения TypeScript декораторов из дескрипторов"""

import json
import re
from typing import Any, Iterable, List

CLASS_VALIDATOR_DECORATORS = {
    "optional": "IsOptional",
    "string": "IsString",
    "email": "IsEmail",
    "enum": "IsEnum",
    "min_length": "MinLength",
    "max_length": "MaxLength",
    "pattern": "Matches",
    "int": "IsInt",
    "number": "IsNumber",
    "min": "Min",
    "max": "Max",
    "boolean": "IsBoolean",
    "array": "IsArray",
    "nested": "ValidateNested",
}

PARAMETER_DECORATORS = {
    "path": "Param",
    "query": "Query",
    "header": "Headers",
    "body": "Body",
}

HTTP_DECORATORS = {
    "get": "Get",
    "post": "Post",
    "put": "Put",
    "patch": "Patch",
    "delete": "Delete",
}

CONSTRUCTORS = {
    "string": "String",
    "number": "Number",
    "boolean": "Boolean",
    "object": "Object",
    "any": "Object",
}


def ts_string(value: Any) -> str:
    """
    Строковый литерал TypeScript в одинарных кавычках.

    Examples:
        >>> ts_string("users")
        "'users'"
    """
    text = str(value).replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n")
    return f"'{text}'"


def ts_literal(value: Any) -> str:
    """Литерал для enum-ов и примеров: строки в кавычках, остальное как JSON"""
    if isinstance(value, str):
        return ts_string(value)
    return json.dumps(value, default=str)


def constructor_type(type_expression: str) -> str:
    """
    Конструктор типа для @ApiProperty / @ApiParam.

    Examples:
        >>> constructor_type("number[]")
        'Number'
        >>> constructor_type("UserDto")
        'UserDto'
    """
    base = type_expression
    while base.endswith("[]"):
        base = base[:-2]
    base = base.strip("()")

    if " | " in base or base.startswith("Record<"):
        return "Object"
    return CONSTRUCTORS.get(base, base)


def route_path(path: str) -> str:
    """
    Путь OpenAPI в маршрут NestJS.

    Examples:
        >>> route_path("/users/{userId}")
        '/users/:userId'
    """
    return re.sub(r"\{([^}]+)\}", r":\1", path)


def validation_decorator(constraint) -> str:
    kind, value = constraint.kind, constraint.value

    if kind == "type":
        return f"@Type(() => {value})"
    if kind == "nested":
        return "@ValidateNested({ each: true })" if value == "each" else "@ValidateNested()"
    if kind == "pattern":
        pattern = str(value).replace("/", "\\/")
        return f"@Matches(/{pattern}/)"

    name = CLASS_VALIDATOR_DECORATORS[kind]
    if value is None:
        return f"@{name}()"
    if kind == "enum":
        return f"@{name}({value})"
    return f"@{name}({ts_literal(value)})"


def api_property(prop) -> str:
    """Декоратор @ApiProperty для свойства DTO"""
    options = []

    if prop.description:
        options.append(f"description: {ts_string(prop.description)}")

    if prop.example is not None:
        options.append(f"example: {json.dumps(prop.example, default=str)}")

    if not prop.required:
        options.append("required: false")

    if prop.enum_values:
        options.append(f"enum: [{', '.join(ts_literal(v) for v in prop.enum_values)}]")

    if prop.is_array:
        options.append("isArray: true")
        options.append(f"type: () => {constructor_type(prop.item_type or 'any')}")
    elif prop.has_constraint("type"):
        options.append(f"type: () => {prop.type_expression}")

    return f"@ApiProperty({{ {', '.join(options)} }})" if options else "@ApiProperty()"


def property_decorators(prop) -> List[str]:
    """
    Декораторы свойства DTO: class-validator, class-transformer, swagger.

    Args:
        prop: PropertyDescriptor

    Returns:
        Список строк декораторов в порядке вывода
    """
    decorators = [validation_decorator(c) for c in prop.constraints]
    decorators.append(api_property(prop))
    return decorators


def validator_imports(models: Iterable) -> List[str]:
    """Имена class-validator декораторов, используемых моделями"""
    names = set()
    for model in models:
        for prop in model.properties:
            for constraint in prop.constraints:
                if constraint.kind in CLASS_VALIDATOR_DECORATORS:
                    names.add(CLASS_VALIDATOR_DECORATORS[constraint.kind])
    return sorted(names)


def uses_class_transformer(models: Iterable) -> bool:
    return any(
        prop.has_constraint("type") for model in models for prop in model.properties
    )


def argument_decorator(parameter) -> str:
    """
    Декоратор аргумента метода контроллера.

    Examples:
        @Param('userId'), @Headers('X-Request-ID'), @Body()
    """
    name = PARAMETER_DECORATORS.get(parameter.kind)
    if name is None:
        return ""
    if parameter.kind == "body":
        return "@Body()"
    return f"@{name}({ts_string(parameter.wire_name)})"


def argument_declaration(parameter) -> str:
    """Объявление аргумента: name: type или name?: type"""
    return f"{parameter.declaration}: {parameter.type_expression}"


def controller_signature(endpoint) -> str:
    parts = []
    for parameter in endpoint.arguments:
        decorator = argument_decorator(parameter)
        declaration = argument_declaration(parameter)
        parts.append(f"{decorator} {declaration}" if decorator else declaration)
    return ", ".join(parts)


def service_signature(endpoint) -> str:
    return ", ".join(argument_declaration(p) for p in endpoint.arguments)


def http_decorator(endpoint) -> str:
    return f"@{HTTP_DECORATORS[endpoint.http_method]}({ts_string(route_path(endpoint.path))})"


def endpoint_decorators(endpoint) -> List[str]:
    """
    Swagger и HTTP декораторы метода контроллера (без декоратора метода).

    Порядок: ApiOperation, ApiParam, ApiQuery, ApiHeader, ApiResponse,
    HttpCode.
    """
    decorators = []

    if endpoint.summary:
        options = [f"summary: {ts_string(endpoint.summary)}"]
        if endpoint.deprecated:
            options.append("deprecated: true")
        decorators.append(f"@ApiOperation({{ {', '.join(options)} }})")

    for parameter in endpoint.parameters:
        if parameter.kind == "path":
            decorators.append(
                f"@ApiParam({{ name: {ts_string(parameter.wire_name)}, "
                f"type: {constructor_type(parameter.type_expression)} }})"
            )

    for parameter in endpoint.parameters:
        if parameter.kind == "query":
            decorators.append(
                f"@ApiQuery({{ name: {ts_string(parameter.wire_name)}, "
                f"type: {constructor_type(parameter.type_expression)}, "
                f"required: {str(parameter.required).lower()} }})"
            )

    for parameter in endpoint.parameters:
        if parameter.kind == "header":
            decorators.append(api_header(parameter))

    for response in endpoint.responses:
        status = response.status_code if response.status_code is not None else ts_string(response.status)
        if response.type_expression not in ("void", "any") and response.status != "204":
            decorators.append(
                f"@ApiResponse({{ status: {status}, "
                f"type: {response_type(response.type_expression)} }})"
            )
        else:
            decorators.append(f"@ApiResponse({{ status: {status} }})")

    if endpoint.force_status_code is not None:
        decorators.append(f"@HttpCode({endpoint.force_status_code})")

    return decorators


def api_header(parameter) -> str:
    description = parameter.description or f"{parameter.wire_name} header parameter"
    options = [
        f"name: {ts_string(parameter.wire_name)}",
        f"description: {ts_string(description)}",
        f"required: {str(parameter.required).lower()}",
    ]

    schema = [
        f"{key}: {ts_string(parameter.constraint_schema[key])}"
        for key in ("type", "pattern", "format")
        if parameter.constraint_schema.get(key)
    ]
    if schema:
        options.append(f"schema: {{ {', '.join(schema)} }}")

    return f"@ApiHeader({{ {', '.join(options)} }})"


def response_type(type_expression: str) -> str:
    """
    Значение type для @ApiResponse: массивы в виде [Ctor].

    Examples:
        >>> response_type("ItemDto[]")
        '[ItemDto]'
    """
    constructor = constructor_type(type_expression)
    if type_expression.endswith("[]") and constructor != "Object":
        return f"[{constructor}]"
    return constructor


def controller_imports(endpoints: Iterable, tags: Iterable[str] = ()) -> dict:
    """
    Импорты контроллера по фактически используемым декораторам.

    Returns:
        {"common": [...], "swagger": [...]} для @nestjs/common и @nestjs/swagger
    """
    used = {"Controller", "NotImplementedException"}
    for endpoint in endpoints:
        lines = [http_decorator(endpoint), controller_signature(endpoint)]
        lines.extend(endpoint_decorators(endpoint))
        for line in lines:
            used.update(re.findall(r"@(\w+)\(", line))

    if tags:
        used.add("ApiTags")

    return {
        "common": sorted(name for name in used if not name.startswith("Api")),
        "swagger": sorted(name for name in used if name.startswith("Api")),
    }
