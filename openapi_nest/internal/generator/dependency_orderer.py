from typing import Dict, List, Tuple

from ..types.models import ModelDescriptor


class DependencyOrderer:
    """
    Топологическая сортировка моделей по depends_on.

    Обход в глубину в порядке регистрации моделей; при повторном входе в
    модель, которая еще обходится, спуск просто прекращается, а ребро
    запоминается в back_edges.
    """

    def __init__(self, models: List[ModelDescriptor]):
        self.models = list(models)
        self.back_edges: List[Tuple[str, str]] = []

    def order(self) -> List[ModelDescriptor]:
        by_name: Dict[str, ModelDescriptor] = {}
        for model in self.models:
            by_name.setdefault(model.name, model)

        ordered: List[ModelDescriptor] = []
        visited = set()
        visiting = set()
        self.back_edges = []

        def visit(name: str):
            if name in visited:
                return
            visiting.add(name)

            for dependency in by_name[name].depends_on:
                if dependency not in by_name:
                    continue
                if dependency in visiting:
                    self.back_edges.append((name, dependency))
                    continue
                visit(dependency)

            visiting.discard(name)
            visited.add(name)
            ordered.append(by_name[name])

        for name in by_name:
            visit(name)

        return ordered
