"""
Отслеживание изменений файлов спецификаций
"""

import os
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from .internal.parser.openapi import SpecParser


@dataclass(frozen=True)
class FileStamp:
    """Отпечаток файла для сравнения между проходами"""

    mtime: float
    size: int

    @classmethod
    def from_path(cls, path: str) -> "FileStamp":
        stat = os.stat(path)
        return cls(mtime=stat.st_mtime, size=stat.st_size)


class SpecWatcher:
    """
    Поллинг директории спецификаций по mtime и размеру файлов.

    Если за проход найдены изменения (added, changed, deleted), on_change
    вызывается один раз со списком событий. Проходы сериализованы, ошибки
    передаются в on_error и не останавливают наблюдение.
    """

    def __init__(
        self,
        specs_dir: str,
        on_change: Callable[[List[Tuple[str, str]]], None],
        on_error: Callable[[Exception], None] = None,
        interval: float = 1.0,
        parser: SpecParser = None,
    ):
        self.specs_dir = specs_dir
        self.on_change = on_change
        self.on_error = on_error
        self.interval = interval
        self.parser = parser or SpecParser()

        self._snapshot: Dict[str, FileStamp] = {}
        self._lock = threading.Lock()
        self._stopped = threading.Event()

    def scan(self) -> Dict[str, FileStamp]:
        snapshot = {}
        for path in self.parser.find_specs(self.specs_dir):
            try:
                snapshot[path] = FileStamp.from_path(path)
            except FileNotFoundError:
                # файл удален между поиском и stat
                continue
        return snapshot

    def diff(self, previous: Dict[str, FileStamp], current: Dict[str, FileStamp]) -> List[Tuple[str, str]]:
        events = []
        for path in sorted(set(previous) | set(current)):
            if path not in previous:
                events.append(("added", path))
            elif path not in current:
                events.append(("deleted", path))
            elif previous[path] != current[path]:
                events.append(("changed", path))
        return events

    def check(self) -> List[Tuple[str, str]]:
        """Один проход: сравнение с прошлым снимком и вызов обработчиков"""
        with self._lock:
            current = self.scan()
            events = self.diff(self._snapshot, current)
            self._snapshot = current

            if events:
                try:
                    self.on_change(events)
                except Exception as e:
                    if self.on_error is None:
                        raise
                    self.on_error(e)

            return events

    def start(self, max_passes: Optional[int] = None):
        """Блокирующий цикл наблюдения до stop() или KeyboardInterrupt"""
        self._stopped.clear()
        passes = 0
        while not self._stopped.is_set():
            self.check()
            passes += 1
            if max_passes is not None and passes >= max_passes:
                break
            self._stopped.wait(self.interval)

    def stop(self):
        self._stopped.set()


def watch(
    specs_dir: str,
    on_change: Callable[[List[Tuple[str, str]]], None],
    on_error=None,
    interval: float = 1.0,
):
    """Запуск наблюдения с выходом по Ctrl+C"""
    watcher = SpecWatcher(specs_dir, on_change, on_error=on_error, interval=interval)
    try:
        watcher.start()
    except KeyboardInterrupt:
        watcher.stop()
    return watcher
