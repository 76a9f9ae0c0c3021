"""
Тесты для генератора NestJS кода
"""

import os

import pytest

from openapi_nest.config import GeneratorConfig
from openapi_nest.generator import NestCodeGenerator, generate_nest_code
from openapi_nest.internal.errors import MissingSchemaError

FIXTURE = os.path.join(os.path.dirname(__file__), "fixtures", "user.openapi.yaml")


@pytest.fixture
def generator():
    return NestCodeGenerator.from_path(FIXTURE)


class TestNestCodeGenerator:
    """Тесты основной функциональности генератора"""

    def test_build(self, generator):
        """Тест пакета дескрипторов"""
        batch = generator.build()

        assert batch.resource_name == "user"
        assert batch.models.names == [
            "UserProfileDto",
            "UserDto",
            "CreateUserRequestDto",
            "ErrorDto",
            "GetUsersResponseDto",
        ]
        assert [e.name for e in batch.models.enums] == ["StatusEnum"]
        assert batch.models.skipped == []

        assert batch.controller.class_name == "UserControllerBase"
        assert batch.controller.tags == ["users"]
        assert batch.controller.dto_imports == [
            "CreateUserRequestDto",
            "ErrorDto",
            "GetUsersResponseDto",
            "UserDto",
        ]
        assert batch.service is None

    def test_models(self, generator):
        """Тест свойств моделей фикстуры"""
        models = generator.build().models

        user = models.get("UserDto")
        assert user.get_property("manager").type_expression == "any"
        assert user.get_property("profile").type_expression == "UserProfileDto"
        assert user.get_property("tags").type_expression == "string[]"
        assert user.get_property("email").required is True

        response = models.get("GetUsersResponseDto")
        assert response.source == "response"
        assert response.get_property("items").type_expression == "UserDto[]"
        assert response.get_property("total").type_expression == "number"

    def test_endpoints(self, generator):
        """Тест эндпоинтов фикстуры"""
        endpoints = {e.operation_name: e for e in generator.build().controller.endpoints}

        assert list(endpoints) == ["getUsers", "createUser", "getUser", "deleteUser"]
        assert endpoints["getUsers"].return_type == "GetUsersResponseDto"
        assert endpoints["createUser"].return_type == "UserDto"
        assert endpoints["createUser"].force_status_code is None
        assert endpoints["getUser"].return_type == "UserDto"
        assert endpoints["deleteUser"].return_type == "void"
        assert endpoints["deleteUser"].force_status_code == 204

    def test_generated_files(self, generator):
        """Тест файлов проекта"""
        project = generator.generate()

        assert project.name == "user"
        assert [f.file_name for f in project.files] == [
            os.path.join("user", "user.dto.ts"),
            os.path.join("user", "user.controller.base.ts"),
        ]

    def test_dto_file(self, generator):
        """Тест содержимого DTO файла"""
        dto = str(generator.generate().get_file(os.path.join("user", "user.dto.ts")))

        assert "import { Type } from 'class-transformer';" in dto
        assert "export enum StatusEnum {\n  ACTIVE = 'active',\n  BLOCKED = 'blocked',\n}" in dto
        assert dto.index("export class UserProfileDto") < dto.index("export class UserDto")
        assert "@ApiProperty({ description: 'User id', example: \"u-1\" })\n  id: string;" in dto
        assert "  @IsString()\n  @IsEmail()\n" in dto
        assert "  @MaxLength(255)\n" in dto
        assert "  @IsInt()\n  @Min(0)\n  @Max(150)\n" in dto
        assert "  manager?: any;" in dto
        assert "  items?: UserDto[];" in dto

    def test_controller_file(self, generator):
        """Тест содержимого контроллера"""
        controller = str(
            generator.generate().get_file(os.path.join("user", "user.controller.base.ts"))
        )

        assert (
            "import { CreateUserRequestDto, ErrorDto, GetUsersResponseDto, UserDto } "
            "from './user.dto';"
        ) in controller
        assert "@ApiTags('users')\n@Controller()\nexport abstract class UserControllerBase {" in controller
        assert (
            "async getUsers(@Headers('X-Request-ID') xRequestID: string, "
            "@Query('limit') limit?: number): Promise<GetUsersResponseDto>"
        ) in controller
        assert "@Get('/api/v1/users/:userId')" in controller
        assert "async getUser(@Param('userId') userId: string): Promise<UserDto>" in controller
        assert "async createUser(@Body() body: CreateUserRequestDto): Promise<UserDto>" in controller
        assert "@HttpCode(204)" in controller
        assert "async deleteUser(@Param('userId') userId: string): Promise<void>" in controller
        assert "throw new NotImplementedException('deleteUser');" in controller

    def test_service_file(self):
        """Тест генерации сервиса"""
        config = GeneratorConfig(generate_services=True, generate_controllers=False)
        project = NestCodeGenerator.from_path(FIXTURE, config).generate()

        assert [f.file_name for f in project.files] == [
            os.path.join("user", "user.dto.ts"),
            os.path.join("user", "user.service.ts"),
        ]

        service = str(project.files[1])
        assert "@Injectable()\nexport class UserService {" in service
        assert "async getUser(userId: string): Promise<UserDto>" in service

    def test_generate_is_repeatable(self, generator):
        """Тест что повторная генерация дает тот же результат"""
        first = generator.generate()
        second = generator.generate()

        assert first == second


class TestGenerateNestCode:
    """Тесты функции generate_nest_code"""

    spec = {
        "openapi": "3.0.0",
        "info": {"title": "Orders", "version": "1.0.0"},
        "paths": {
            "/orders": {
                "get": {
                    "operationId": "listOrders",
                    "responses": {
                        "200": {
                            "description": "ok",
                            "content": {
                                "application/json": {
                                    "schema": {
                                        "type": "array",
                                        "items": {"$ref": "#/components/schemas/Order"},
                                    }
                                }
                            },
                        }
                    },
                }
            }
        },
        "components": {
            "schemas": {
                "Order": {
                    "type": "object",
                    "properties": {"group": {"$ref": "#/components/schemas/Group"}},
                }
            }
        },
    }

    def test_generate_from_documents(self):
        """Тест генерации из загруженных документов"""
        project = generate_nest_code(self.spec, self.spec, "order.management")

        file_name = os.path.join("order.management", "order.management.controller.base.ts")
        controller = str(project.get_file(file_name))

        assert "export abstract class OrderManagementControllerBase {" in controller
        assert "Promise<OrderDto[]>" in controller
        assert "@ApiResponse({ status: 200, type: [OrderDto] })" in controller

    def test_strict_mode(self):
        """Тест строгого режима для отсутствующей схемы"""
        with pytest.raises(MissingSchemaError):
            generate_nest_code(self.spec, self.spec, "order", GeneratorConfig(strict=True))
