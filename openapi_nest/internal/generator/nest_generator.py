import os
from typing import Any, Dict, List

from ...config import GeneratorConfig
from ..types.models import (
    ControllerDescriptor,
    GenerationBatch,
    Project,
    ServiceDescriptor,
)
from ..utils.naming import class_name_from_resource
from .endpoint_compiler import EndpointCompiler, dto_imports
from .model_compiler import ModelCompiler
from .templates import TemplateRenderer


class NestGenerator:
    """
    Генерация NestJS файлов для одной спецификации.

    Сначала строится весь пакет дескрипторов, и только затем вызываются
    шаблоны: при ошибке компиляции ни один файл не рендерится.
    """

    def __init__(
        self,
        resolved_document: Dict[str, Any],
        original_document: Dict[str, Any],
        resource_name: str,
        config: GeneratorConfig = None,
        spec_path: str = None,
    ):
        self.resolved_document = resolved_document
        self.original_document = original_document
        self.resource_name = resource_name
        self.config = config or GeneratorConfig()
        self.spec_path = spec_path

        self.class_name = class_name_from_resource(resource_name)
        self.renderer = TemplateRenderer(self.config.template_dir)

    def build(self) -> GenerationBatch:
        """Компиляция моделей и эндпоинтов без рендера"""
        endpoint_compiler = EndpointCompiler(
            self.resolved_document,
            self.original_document,
            include_error_types=self.config.include_error_types_in_return_type,
            synthesize_response_dtos=self.config.synthesize_response_dtos,
            spec_path=self.spec_path,
        )
        endpoints = endpoint_compiler.compile_all()

        models = ModelCompiler(
            self.original_document, strict=self.config.strict, spec_path=self.spec_path
        ).compile_all(extra_roots=endpoint_compiler.response_models)

        imports = dto_imports(endpoints)

        controller = None
        if self.config.generate_controllers:
            controller = ControllerDescriptor(
                class_name=f"{self.class_name}ControllerBase",
                resource_name=self.resource_name,
                tags=self._tags(endpoints),
                endpoints=endpoints,
                dto_imports=imports,
            )

        service = None
        if self.config.generate_services:
            service = ServiceDescriptor(
                class_name=f"{self.class_name}Service",
                resource_name=self.resource_name,
                endpoints=endpoints,
                dto_imports=imports,
            )

        return GenerationBatch(
            resource_name=self.resource_name,
            models=models,
            controller=controller,
            service=service,
        )

    def generate(self, batch: GenerationBatch = None) -> Project:
        """Генерация проекта: <resource>/<resource>.dto.ts и остальные файлы"""
        if batch is None:
            batch = self.build()
        project = Project(name=self.resource_name)

        if self.config.generate_dtos:
            project.add_file(
                self._file_name("dto"),
                content=self.renderer.render(
                    "dto",
                    {
                        "resource_name": self.resource_name,
                        "models": batch.models.models,
                        "enums": batch.models.enums,
                    },
                ),
            )

        if batch.controller is not None:
            project.add_file(
                self._file_name("controller.base"),
                content=self.renderer.render("controller", self._context(batch.controller)),
            )

        if batch.service is not None:
            project.add_file(
                self._file_name("service"),
                content=self.renderer.render("service", self._context(batch.service)),
            )

        return project

    def _file_name(self, kind: str) -> str:
        return os.path.join(self.resource_name, f"{self.resource_name}.{kind}.ts")

    @staticmethod
    def _context(descriptor) -> Dict[str, Any]:
        return {
            "class_name": descriptor.class_name,
            "resource_name": descriptor.resource_name,
            "endpoints": descriptor.endpoints,
            "dto_imports": descriptor.dto_imports,
            "tags": getattr(descriptor, "tags", []),
        }

    @staticmethod
    def _tags(endpoints) -> List[str]:
        tags = []
        for endpoint in endpoints:
            for tag in endpoint.tags:
                if tag not in tags:
                    tags.append(tag)
        return tags
