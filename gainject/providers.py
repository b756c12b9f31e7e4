from abc import ABC, abstractmethod
from typing import Callable, Generic

from .point import T


class Provider(ABC, Generic[T]):
    """Provides instances of T. Bind ``Provider[T]`` to an implementation to inject it."""

    @abstractmethod
    def get(self) -> T:
        raise NotImplementedError()


class LazyProvider(Provider[T]):
    """Defers every call to get() to the wrapped supplier."""

    def __init__(self, supplier: Callable[[], T]):
        self._supplier = supplier

    def get(self) -> T:
        return self._supplier()
