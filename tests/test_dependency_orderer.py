"""
Тесты порядка моделей
"""

from openapi_nest.internal.generator.dependency_orderer import DependencyOrderer
from openapi_nest.internal.types.models import ModelDescriptor


def model(name, *depends_on):
    return ModelDescriptor(name=name, depends_on=list(depends_on))


class TestDependencyOrderer:
    """Тесты топологической сортировки"""

    def test_dependencies_first(self):
        """Тест что зависимость идет раньше модели"""
        orderer = DependencyOrderer(
            [model("OrderDto", "CustomerDto", "LineDto"), model("CustomerDto"), model("LineDto")]
        )

        names = [m.name for m in orderer.order()]

        assert names == ["CustomerDto", "LineDto", "OrderDto"]
        assert orderer.back_edges == []

    def test_registration_order_kept(self):
        """Тест что независимые модели идут в порядке регистрации"""
        orderer = DependencyOrderer([model("BDto"), model("ADto"), model("CDto")])
        assert [m.name for m in orderer.order()] == ["BDto", "ADto", "CDto"]

    def test_back_edges(self):
        """Тест фиксации ребра, замыкающего цикл"""
        orderer = DependencyOrderer([model("ADto", "BDto"), model("BDto", "ADto")])

        names = [m.name for m in orderer.order()]

        assert names == ["BDto", "ADto"]
        assert orderer.back_edges == [("BDto", "ADto")]

    def test_unknown_dependency_ignored(self):
        """Тест зависимости на модель вне списка"""
        orderer = DependencyOrderer([model("ADto", "GhostDto")])

        assert [m.name for m in orderer.order()] == ["ADto"]
        assert orderer.back_edges == []
