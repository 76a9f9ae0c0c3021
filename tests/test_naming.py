"""
Тесты утилит имен
"""

import pytest

from openapi_nest.internal.utils import (
    capitalize,
    class_name_from_resource,
    enum_key,
    enum_name,
    extract_resource_name,
    header_to_identifier,
    operation_name_from_path,
)


class TestClassNames:
    """Тесты имен классов из имени ресурса"""

    @pytest.mark.parametrize(
        "resource_name, expected",
        [
            ("user", "User"),
            ("user.query", "UserQuery"),
            ("api.v1.users", "ApiV1Users"),
            ("order-management_service", "OrderManagementService"),
        ],
    )
    def test_class_name_from_resource(self, resource_name, expected):
        """Тест разбиения по '.', '-', '_'"""
        assert class_name_from_resource(resource_name) == expected

    def test_capitalize_keeps_tail(self):
        """Тест что остальные буквы не меняются"""
        assert capitalize("userId") == "UserId"
        assert capitalize("") == ""


class TestIdentifiers:
    """Тесты идентификаторов параметров и enum-ов"""

    @pytest.mark.parametrize(
        "header_name, expected",
        [
            ("X-Request-ID", "xRequestID"),
            ("X-Trace-Id", "xTraceId"),
            ("authorization", "authorization"),
            ("Content-Type", "contentType"),
        ],
    )
    def test_header_to_identifier(self, header_name, expected):
        """Тест camelCase имен заголовков"""
        assert header_to_identifier(header_name) == expected

    def test_enum_key(self):
        """Тест ключей enum-а"""
        assert enum_key("active") == "ACTIVE"
        assert enum_key("in-progress") == "IN_PROGRESS"
        assert enum_key("a.b c") == "A_B_C"

    def test_enum_name(self):
        """Тест имени enum-а по имени свойства"""
        assert enum_name("status") == "StatusEnum"

    def test_operation_name_from_path(self):
        """Тест имени операции без operationId"""
        assert operation_name_from_path("get", "/api/v1/users") == "getUsers"
        assert operation_name_from_path("delete", "/users/{userId}") == "deleteUserId"


class TestResourceNames:
    """Тесты имени ресурса из пути к файлу"""

    @pytest.mark.parametrize(
        "spec_path, expected",
        [
            ("/path/to/user.openapi.yaml", "user"),
            ("order.yaml", "order"),
            ("specs/catalog.json", "catalog"),
            ("specs/nested/item.yml", "item"),
            ("/path/to/user.v1.openapi.yaml", "user.v1"),
        ],
    )
    def test_extract_resource_name(self, spec_path, expected):
        """Тест отбрасывания расширения и суффикса .openapi"""
        assert extract_resource_name(spec_path) == expected
