import threading
from typing import Callable, Any

from .point import InjectionPoint, T


Producer = Callable[[], T]


class BindingRegistry(object):
    """Storage of producers keyed by injection point. Last write wins."""

    def __init__(self):
        self._producers: dict[InjectionPoint[Any], Producer[Any]] = dict()
        self._lock = threading.Lock()

    def put(self, point: InjectionPoint[T], producer: Producer[T]) -> None:
        with self._lock:
            self._producers[point] = producer

    def get(self, point: InjectionPoint[T]) -> Producer[T] | None:
        return self._producers.get(point)

    def has(self, point: InjectionPoint[T]) -> bool:
        return point in self._producers

    def __len__(self):
        return len(self._producers)
