from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, field_validator, model_validator


PRIMITIVE_TYPES = ("string", "number", "boolean", "object", "any", "void")


class ValidationConstraint(BaseModel):
    """Тег валидации свойства (превращается в декоратор class-validator)"""

    kind: str
    value: Optional[Any] = None

    def __str__(self):
        return self.kind if self.value is None else f"{self.kind}({self.value})"


class PropertyDescriptor(BaseModel):
    name: str
    required: bool = False
    type_expression: str = "any"
    constraints: list[ValidationConstraint] = []

    description: Optional[str] = None
    example: Any = None
    enum_values: list[Any] = []
    is_array: bool = False
    item_type: Optional[str] = None

    @model_validator(mode="after")
    def sync_optional_marker(self):
        # optional-маркер есть ровно у необязательных свойств
        constraints = [c for c in self.constraints if c.kind != "optional"]
        if not self.required:
            constraints.insert(0, ValidationConstraint(kind="optional"))
        self.constraints = constraints
        return self

    @property
    def declaration(self) -> str:
        return self.name if self.required else f"{self.name}?"

    def has_constraint(self, kind: str) -> bool:
        return any(c.kind == kind for c in self.constraints)


class ModelDescriptor(BaseModel):
    name: str
    properties: list[PropertyDescriptor] = []
    depends_on: list[str] = []

    source: str = "component"
    description: Optional[str] = None

    @field_validator("depends_on", mode="before")
    def unique_dependencies(cls, value):
        _value = []
        for name in value or []:
            if name not in _value:
                _value.append(name)
        return _value

    def get_property(self, name: str) -> Optional[PropertyDescriptor]:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None


class EnumValue(BaseModel):
    key: str
    value: Any


class EnumDescriptor(BaseModel):
    name: str
    values: list[EnumValue] = []


class ParameterDescriptor(BaseModel):
    name: str
    wire_name: str
    kind: str
    required: bool = False
    type_expression: str = "string"

    constraint_schema: Dict[str, Any] = {}
    description: Optional[str] = None

    @property
    def declaration(self) -> str:
        return self.name if self.required else f"{self.name}?"


class BodyDescriptor(BaseModel):
    type_expression: str = "any"
    required: bool = True
    description: Optional[str] = None


class ResponseDescriptor(BaseModel):
    status: str
    type_expression: str = "void"
    description: Optional[str] = None
    inline: bool = False

    @property
    def is_success(self) -> bool:
        return self.status.startswith("2")

    @property
    def status_code(self) -> Optional[int]:
        return int(self.status) if self.status.isdigit() else None


class EndpointDescriptor(BaseModel):
    http_method: str
    path: str
    operation_name: str

    summary: Optional[str] = None
    description: Optional[str] = None
    deprecated: bool = False
    tags: list[str] = []

    parameters: list[ParameterDescriptor] = []
    body: Optional[BodyDescriptor] = None
    arguments: list[ParameterDescriptor] = []

    responses: list[ResponseDescriptor] = []
    return_type: str = "void"
    force_status_code: Optional[int] = None


class ControllerDescriptor(BaseModel):
    class_name: str
    resource_name: str
    tags: list[str] = []
    endpoints: list[EndpointDescriptor] = []
    dto_imports: list[str] = []


class ServiceDescriptor(BaseModel):
    class_name: str
    resource_name: str
    endpoints: list[EndpointDescriptor] = []
    dto_imports: list[str] = []


class ModelBatch(BaseModel):
    models: list[ModelDescriptor] = []
    enums: list[EnumDescriptor] = []
    skipped: list[str] = []

    def get(self, name: str) -> Optional[ModelDescriptor]:
        for model in self.models:
            if model.name == name:
                return model
        return None

    @property
    def names(self) -> list[str]:
        return [model.name for model in self.models]


class GenerationBatch(BaseModel):
    resource_name: str
    models: ModelBatch = ModelBatch()
    controller: Optional[ControllerDescriptor] = None
    service: Optional[ServiceDescriptor] = None


@dataclass
class MappingContext:
    """Контекст маппинга одного свойства"""

    model_name: str
    base_name: str
    property_name: str
    dependencies: List[str] = field(default_factory=list)
    blocked: set = field(default_factory=set)

    def add_dependency(self, name: str):
        if name not in self.dependencies:
            self.dependencies.append(name)


@dataclass
class MappedType:
    """Результат маппинга схемы в TypeScript тип"""

    type_expression: str
    constraints: List[ValidationConstraint] = field(default_factory=list)
    item_type: Optional[str] = None
    enum_values: List[Any] = field(default_factory=list)

    @property
    def is_array(self) -> bool:
        return self.type_expression.endswith("[]")


class CodeFile(BaseModel):
    file_name: str
    content: str = ""

    def __str__(self):
        return self.content


class Project(BaseModel):
    name: str
    files: list[CodeFile] = []

    def add_file(self, file_name: Union["CodeFile", str], **kwargs) -> "CodeFile":
        if isinstance(file_name, str):
            file_name = CodeFile(file_name=file_name, **kwargs)

        self.files.append(file_name)
        return file_name

    def get_file(self, file_name: str) -> Optional["CodeFile"]:
        for code_file in self.files:
            if code_file.file_name == file_name:
                return code_file
        return None
