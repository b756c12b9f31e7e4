import inspect
import logging
import threading
import typing
from typing import Any, Callable, Dict, Tuple

from .builder import GraphBuilder
from .core import DuplicateBindingError, InjectionException, UnresolvedBindingError
from .point import InjectionPoint, T
from .providers import Provider
from .reflection import Parameter
from .registry import BindingRegistry, Producer
from .rules import ProviderRuleBuilder, RuleBuilder
from .scopes import is_singleton
from .typetoken import TypeToken


logger = logging.getLogger(__name__)


_ABSENT = object()


class InstanceCache(object):
    """Instances of singleton types, created at most once per type.

    Each type has its own re-entrant lock so building one singleton may
    resolve others. A factory returning None is cached like any other value.
    """

    def __init__(self):
        self._instances: dict[type, Any] = dict()
        self._locks: dict[type, threading.RLock] = dict()
        self._guard = threading.Lock()

    def get_or_create(self, key: type[T], factory: Callable[[type[T]], T]) -> T:
        instance = self._instances.get(key, _ABSENT)
        if instance is not _ABSENT:
            return instance
        with self._lock_for(key):
            instance = self._instances.get(key, _ABSENT)
            if instance is _ABSENT:
                instance = factory(key)
                self._instances[key] = instance
                logger.debug('Cached singleton %s.%s', key.__module__, key.__qualname__)
            return instance

    def _lock_for(self, key: type) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.RLock()
            return lock

    def __contains__(self, key: type) -> bool:
        return key in self._instances


class InjectionContext(object):

    def __init__(self, *, allow_overrides: bool = False):
        self._registry = BindingRegistry()
        self._cache = InstanceCache()
        self._builder = GraphBuilder(self)
        self._allow_overrides = allow_overrides
        self._lock = threading.Lock()

    @property
    def registry(self) -> BindingRegistry:
        return self._registry

    @property
    def builder(self) -> GraphBuilder:
        return self._builder

    @property
    def allow_overrides(self) -> bool:
        return self._allow_overrides

    def binding_for(self, target: Any, *markers: Any) -> RuleBuilder:
        """Starts a binding declaration, finished by ``map(impl)``."""
        token = TypeToken.of(target)
        raw = token.raw_type
        if isinstance(raw, type) and issubclass(raw, Provider):
            return ProviderRuleBuilder(self, token, *markers)
        return RuleBuilder(self, token, *markers)

    def add(self, point: InjectionPoint[T], producer: Producer[T]) -> None:
        with self._lock:
            if self._registry.has(point):
                if not self._allow_overrides:
                    raise DuplicateBindingError(point)
                logger.warning('Overriding binding for %s', point)
            self._registry.put(point, producer)

    def lookup(self, point: InjectionPoint[T]) -> Producer[T]:
        producer = self._registry.get(point)
        if producer is None:
            raise UnresolvedBindingError(point)
        return producer

    def cached_or_build(self, target: type[T], factory: Callable[[type[T]], T]) -> T:
        if not is_singleton(target):
            return factory(target)
        return self._cache.get_or_create(target, factory)


class FunctionInjector(object):
    """Merges caller arguments with resolved ones for a function whose
    parameters are partly marked for injection."""

    def __init__(self, function: Callable):
        self._signature = inspect.signature(function)
        hints = typing.get_type_hints(function, include_extras=True)
        self._points: dict[str, InjectionPoint] = dict()
        for p in self._signature.parameters.values():
            if p.name not in hints:
                continue
            param = Parameter(function.__qualname__, p, hints[p.name])
            if not param.injectable:
                continue
            if p.kind in (inspect.Parameter.POSITIONAL_ONLY,
                          inspect.Parameter.VAR_POSITIONAL,
                          inspect.Parameter.VAR_KEYWORD):
                raise InjectionException(f"Cannot inject {param}, it must be addressable by name.")
            self._points[p.name] = InjectionPoint.of_member(param)
        self._exposed = self._signature.replace(
            parameters=[p for p in self._signature.parameters.values() if p.name not in self._points])

    @property
    def parameters(self) -> tuple[str, ...]:
        return tuple(self._points)

    def __call__(self,
                 context: InjectionContext,
                 args: Tuple[Any, ...],
                 kwargs: Dict[str, Any],
                 ) -> Tuple[Tuple[Any, ...], Dict[str, Any]]:
        try:
            supplied = self._exposed.bind(*args, **kwargs).arguments
        except TypeError as e:
            raise InjectionException(str(e)) from e
        merged_args = list()
        merged_kwargs = dict()
        positional = True
        for param in self._signature.parameters.values():
            if param.name in self._points:
                value = context.lookup(self._points[param.name])()
            elif param.name in supplied:
                value = supplied[param.name]
            else:
                # Omitted, so later parameters must be passed by keyword.
                positional = False
                continue
            if param.kind == inspect.Parameter.VAR_POSITIONAL:
                merged_args.extend(value)
            elif param.kind == inspect.Parameter.VAR_KEYWORD:
                merged_kwargs.update(value)
            elif param.kind == inspect.Parameter.KEYWORD_ONLY or not positional:
                merged_kwargs[param.name] = value
            else:
                merged_args.append(value)
        return tuple(merged_args), merged_kwargs
