import os
from typing import Any, Dict, Optional

import jinja2

from ..errors import TemplateMissing
from ..utils import decorators

TEMPLATE_EXTENSION = ".j2"


class Templates:
    """Встроенные шаблоны для генерации файлов"""

    dto = """import { ApiProperty } from '@nestjs/swagger';
{% set validators = validator_imports(models) %}
{% if validators %}
import { {{ validators|join(', ') }} } from 'class-validator';
{% endif %}
{% if uses_class_transformer(models) %}
import { Type } from 'class-transformer';
{% endif %}
{% for enum in enums %}

export enum {{ enum.name }} {
{% for value in enum.values %}
  {{ value.key }} = {{ value.value|ts_literal }},
{% endfor %}
}
{% endfor %}
{% for model in models %}

{% if model.description %}
/** {{ model.description }} */
{% endif %}
export class {{ model.name }} {
{% for prop in model.properties %}
{% if not loop.first %}

{% endif %}
{% for decorator in prop|property_decorators %}
  {{ decorator }}
{% endfor %}
  {{ prop.declaration }}: {{ prop.type_expression }};
{% endfor %}
}
{% endfor %}
"""

    controller = """{% set imports = controller_imports(endpoints, tags) %}
import { {{ imports.common|join(', ') }} } from '@nestjs/common';
{% if imports.swagger %}
import { {{ imports.swagger|join(', ') }} } from '@nestjs/swagger';
{% endif %}
{% if dto_imports %}
import { {{ dto_imports|join(', ') }} } from './{{ resource_name }}.dto';
{% endif %}

{% if tags %}
@ApiTags({{ tags|map('ts_string')|join(', ') }})
{% endif %}
@Controller()
export abstract class {{ class_name }} {
{% for endpoint in endpoints %}
{% if not loop.first %}

{% endif %}
  {{ endpoint|http_decorator }}
{% for decorator in endpoint|endpoint_decorators %}
  {{ decorator }}
{% endfor %}
  async {{ endpoint.operation_name }}({{ endpoint|controller_signature }}): Promise<{{ endpoint.return_type }}> {
    throw new NotImplementedException('{{ endpoint.operation_name }}');
  }
{% endfor %}
}
"""

    service = """import { Injectable, NotImplementedException } from '@nestjs/common';
{% if dto_imports %}
import { {{ dto_imports|join(', ') }} } from './{{ resource_name }}.dto';
{% endif %}

@Injectable()
export class {{ class_name }} {
{% for endpoint in endpoints %}
{% if not loop.first %}

{% endif %}
  async {{ endpoint.operation_name }}({{ endpoint|service_signature }}): Promise<{{ endpoint.return_type }}> {
    throw new NotImplementedException('{{ endpoint.operation_name }}');
  }
{% endfor %}
}
"""

    @classmethod
    def get(cls, template_id: str) -> Optional[str]:
        """Встроенный шаблон по идентификатору"""
        source = getattr(cls, template_id, None)
        return source if isinstance(source, str) else None


class TemplateRenderer:
    """
    Рендер шаблонов: сначала <template_dir>/<id>.j2, затем встроенные.

    Отсутствие пользовательской директории не ошибка, она просто не
    участвует в поиске.
    """

    def __init__(self, template_dir: str = None):
        self.template_dir = template_dir

        loaders = []
        if template_dir and os.path.isdir(template_dir):
            loaders.append(jinja2.FileSystemLoader(template_dir))
        loaders.append(jinja2.FunctionLoader(self._load_builtin))

        self.environment = jinja2.Environment(
            loader=jinja2.ChoiceLoader(loaders),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=jinja2.StrictUndefined,
        )
        self.environment.filters.update(
            ts_string=decorators.ts_string,
            ts_literal=decorators.ts_literal,
            property_decorators=decorators.property_decorators,
            endpoint_decorators=decorators.endpoint_decorators,
            http_decorator=decorators.http_decorator,
            controller_signature=decorators.controller_signature,
            service_signature=decorators.service_signature,
        )
        self.environment.globals.update(
            validator_imports=decorators.validator_imports,
            uses_class_transformer=decorators.uses_class_transformer,
            controller_imports=decorators.controller_imports,
        )

    def render(self, template_id: str, context: Dict[str, Any]) -> str:
        """Рендер шаблона по идентификатору ('dto', 'controller', 'service')"""
        try:
            template = self.environment.get_template(f"{template_id}{TEMPLATE_EXTENSION}")
        except jinja2.TemplateNotFound as error:
            raise TemplateMissing(template_id, self.template_dir) from error

        return template.render(**context)

    @staticmethod
    def _load_builtin(name: str) -> Optional[str]:
        if not name.endswith(TEMPLATE_EXTENSION):
            return None
        return Templates.get(name[: -len(TEMPLATE_EXTENSION)])
