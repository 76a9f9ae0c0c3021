"""
Тесты отслеживания изменений спецификаций
"""

import pytest

from openapi_nest.watcher import FileStamp, SpecWatcher


class TestSpecWatcher:
    """Тесты SpecWatcher"""

    def test_events(self, tmp_path):
        """Тест событий added, changed, deleted"""
        calls = []
        watcher = SpecWatcher(str(tmp_path), calls.append)
        spec = tmp_path / "user.yaml"

        spec.write_text("openapi: 3.0.0\n")
        assert watcher.check() == [("added", str(spec))]

        assert watcher.check() == []

        spec.write_text("openapi: 3.0.0\npaths: {}\n")
        assert watcher.check() == [("changed", str(spec))]

        spec.unlink()
        assert watcher.check() == [("deleted", str(spec))]

        assert calls == [
            [("added", str(spec))],
            [("changed", str(spec))],
            [("deleted", str(spec))],
        ]

    def test_single_call_per_pass(self, tmp_path):
        """Тест одного вызова обработчика на несколько изменений"""
        calls = []
        watcher = SpecWatcher(str(tmp_path), calls.append)

        (tmp_path / "a.yaml").write_text("a")
        (tmp_path / "b.json").write_text("{}")
        watcher.check()

        assert len(calls) == 1
        assert [event for event, _ in calls[0]] == ["added", "added"]

    def test_error_handler(self, tmp_path):
        """Тест что ошибка обработчика передается в on_error"""
        errors = []

        def failing(events):
            raise RuntimeError("boom")

        watcher = SpecWatcher(str(tmp_path), failing, on_error=errors.append)
        (tmp_path / "user.yaml").write_text("openapi: 3.0.0")

        watcher.check()
        (tmp_path / "order.yaml").write_text("openapi: 3.0.0")
        watcher.check()

        assert [str(e) for e in errors] == ["boom", "boom"]

    def test_error_without_handler(self, tmp_path):
        """Тест проброса ошибки без on_error"""

        def failing(events):
            raise RuntimeError("boom")

        watcher = SpecWatcher(str(tmp_path), failing)
        (tmp_path / "user.yaml").write_text("openapi: 3.0.0")

        with pytest.raises(RuntimeError):
            watcher.check()

    def test_start_with_max_passes(self, tmp_path):
        """Тест ограниченного числа проходов"""
        calls = []
        (tmp_path / "user.yaml").write_text("openapi: 3.0.0")
        watcher = SpecWatcher(str(tmp_path), calls.append, interval=0)

        watcher.start(max_passes=2)

        assert len(calls) == 1

    def test_file_stamp(self, tmp_path):
        """Тест отпечатка файла"""
        spec = tmp_path / "user.yaml"
        spec.write_text("abc")

        stamp = FileStamp.from_path(str(spec))

        assert stamp.size == 3
        assert stamp == FileStamp.from_path(str(spec))
