"""Генератор NestJS DTO и контроллеров из OpenAPI спецификаций"""

__version__ = "0.1.0"
