import argparse
import os
import sys
from typing import List, Tuple

from openapi_nest.config import CONFIG_FILE, GeneratorConfig
from openapi_nest.generator import NestCodeGenerator
from openapi_nest.internal.errors import ConfigError
from openapi_nest.internal.parser.openapi import SpecParser
from openapi_nest.internal.types.models import Project
from openapi_nest.watcher import watch

EVENT_LABELS = {
    "added": "добавлен",
    "changed": "изменен",
    "deleted": "удален",
}


def _load_config(args) -> GeneratorConfig:
    """Конфиг из файла (если есть) с наложением аргументов командной строки"""
    if args.config:
        if not os.path.exists(args.config):
            raise ConfigError("Файл конфигурации не найден", args.config)
        file_config = GeneratorConfig.from_file(args.config)
    else:
        file_config = GeneratorConfig.from_file()

    if file_config:
        print(f"📋 Используется конфиг {args.config or CONFIG_FILE}")

    return (file_config or GeneratorConfig()).merge_with_args(args)


def _generate_spec_core(spec_path: str, config: GeneratorConfig) -> Project:
    """Ядро генерации для одной спецификации - только генерация без сохранения"""
    print(f"📥 Загрузка спецификации {spec_path}...")
    spec = SpecParser().parse_spec(spec_path)

    print(f"⚙️ Генерация кода для ресурса {spec.resource_name}...")
    generator = NestCodeGenerator(spec, config)
    batch = generator.build()

    if batch.models.skipped:
        print(f"⚠️ Пропущены модели без схемы: {', '.join(batch.models.skipped)}")

    return generator.generate(batch)


def _save_project_files(project: Project, target_path: str):
    """Сохранение файлов проекта"""
    print(f"💾 Сохранение {len(project.files)} файлов...")

    for code_model in project.files:
        path = os.path.join(target_path, code_model.file_name)
        os.makedirs(os.path.dirname(path), exist_ok=True)

        with open(path, "w") as f:
            f.write(str(code_model))

    print(f"📦 Файлы ресурса {project.name} созданы в: {os.path.abspath(target_path)}")


def _generate_all(config: GeneratorConfig) -> int:
    """Генерация по всем спецификациям; первая ошибка прерывает генерацию"""
    specs = SpecParser().find_specs(config.specs_dir)
    if not specs:
        print(f"⚠️ Спецификации не найдены в {config.specs_dir}")
        return 0

    print(f"🚀 Генерация из {len(specs)} спецификаций")
    for spec_path in specs:
        project = _generate_spec_core(spec_path, config)
        _save_project_files(project, config.output_dir)

    print("✅ Генерация завершена успешно!")
    return len(specs)


def _on_specs_changed(config: GeneratorConfig):
    def handler(events: List[Tuple[str, str]]):
        for event, path in events:
            print(f"📝 Файл {EVENT_LABELS.get(event, event)}: {path}")
        _generate_all(config)

    return handler


def _on_watch_error(error: Exception):
    print(f"❌ Ошибка перегенерации: {error}")


def _watch(config: GeneratorConfig):
    print(f"👀 Отслеживание изменений в {config.specs_dir}...")
    watch(config.specs_dir, _on_specs_changed(config), on_error=_on_watch_error)
    print("🛑 Наблюдение остановлено")


def generate(argv: List[str] = None):
    """Команда генерации NestJS кода из OpenAPI спецификаций"""
    parser = argparse.ArgumentParser(
        description="Генерация NestJS DTO и контроллеров из OpenAPI"
    )
    parser.add_argument("-c", "--config", type=str, help="Путь к файлу конфигурации")
    parser.add_argument("-s", "--specs", type=str, help="Директория со спецификациями")
    parser.add_argument("-o", "--output", type=str, help="Директория для сгенерированного кода")
    parser.add_argument(
        "-w", "--watch", action="store_true", help="Перегенерация при изменении спецификаций"
    )
    parser.add_argument(
        "--init-config", action="store_true", help=f"Создать конфиг файл {CONFIG_FILE}"
    )

    args = parser.parse_args(argv)

    try:
        config = _load_config(args)

        if args.init_config:
            config.save_to_file()
            print(f"✅ Создан конфиг файл {CONFIG_FILE}")
            return

        if args.watch:
            _watch(config)
        else:
            _generate_all(config)

    except Exception as e:
        print(f"❌ Ошибка генерации: {e}")
        sys.exit(1)


if __name__ == "__main__":
    generate()
