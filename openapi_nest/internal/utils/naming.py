"""Утилиты для имен классов, параметров и enum-ключей"""

import os
import re

SPEC_EXTENSIONS = (".yaml", ".yml", ".json")


def capitalize(value: str) -> str:
    """Первая буква в верхний регистр, остальное без изменений

    Examples:
        >>> capitalize("userId")
        'UserId'
    """
    return value[:1].upper() + value[1:]


def class_name_from_resource(resource_name: str) -> str:
    """
    Имя класса из имени ресурса: разбиение по '.', '-', '_' и склейка
    сегментов с заглавной буквы.

    Examples:
        >>> class_name_from_resource("order-management.service")
        'OrderManagementService'
        >>> class_name_from_resource("api.v1.users")
        'ApiV1Users'
    """
    return "".join(capitalize(part) for part in re.split(r"[.\-_]", resource_name))


def header_to_identifier(header_name: str) -> str:
    """
    Имя заголовка в camelCase идентификатор.

    Examples:
        >>> header_to_identifier("X-Request-ID")
        'xRequestID'
        >>> header_to_identifier("x-trace-id")
        'xTraceId'
    """
    identifier = re.sub(r"-([a-zA-Z])", lambda m: m.group(1).upper(), header_name)
    return re.sub(r"^[A-Z]", lambda m: m.group(0).lower(), identifier)


def enum_key(value) -> str:
    """Ключ enum-а: верхний регистр, все кроме [A-Z0-9] заменяется на '_'"""
    return re.sub(r"[^A-Z0-9]", "_", str(value).upper())


def enum_name(property_name: str) -> str:
    return f"{capitalize(property_name)}Enum"


def operation_name_from_path(http_method: str, path: str) -> str:
    """Имя метода из HTTP метода и последнего сегмента пути"""
    segments = [s for s in path.split("/") if s]
    resource = re.sub(r"[{}]", "", segments[-1]) if segments else ""
    return f"{http_method}{capitalize(resource)}"


def extract_resource_name(spec_path: str) -> str:
    """
    Имя ресурса из пути к файлу спецификации.

    Examples:
        >>> extract_resource_name("/path/to/user.openapi.yaml")
        'user'
        >>> extract_resource_name("/path/to/user.v1.openapi.yaml")
        'user.v1'
    """
    name = os.path.basename(spec_path)
    for extension in SPEC_EXTENSIONS:
        if name.lower().endswith(extension):
            name = name[: -len(extension)]
            break

    if name.endswith(".openapi"):
        name = name[: -len(".openapi")]

    return name
