import logging
from typing import Any, Generic, TYPE_CHECKING

from .core import BindingError
from .point import InjectionPoint, T
from .providers import LazyProvider, Provider
from .typetoken import TypeToken

if TYPE_CHECKING:
    from .injection import InjectionContext


logger = logging.getLogger(__name__)


def _check_assignable(token: TypeToken, impl: type) -> None:
    if not isinstance(impl, type):
        raise BindingError(f"{impl!r} is not a class.")
    raw = token.raw_type
    if raw is None or getattr(raw, '_is_protocol', False):
        return
    if not issubclass(impl, raw):
        raise BindingError(f"{impl.__qualname__} is not a subclass of {raw.__qualname__}.")


class RuleBuilder(Generic[T]):
    """Declares the implementation class for an injection point."""

    def __init__(self, context: 'InjectionContext', token: TypeToken[T], *markers: Any):
        self._context = context
        self._point = InjectionPoint(token, *markers)

    @property
    def point(self) -> InjectionPoint[T]:
        return self._point

    def map(self, impl: type[T]) -> None:
        _check_assignable(self._point.token, impl)
        builder = self._context.builder
        self._context.add(self._point, lambda: builder.build(impl))
        logger.debug('Bound %s to %s', self._point, impl.__qualname__)


class ProviderRuleBuilder(RuleBuilder[Provider[T]]):
    """Declares the provider class behind a ``Provider[T]`` injection point.

    The provider is only built when get() is called on the injected value.
    """

    def map(self, provider_impl: type[Provider[T]]) -> None:
        _check_assignable(self._point.token, provider_impl)
        builder = self._context.builder

        def _producer() -> Provider[T]:
            return LazyProvider(lambda: builder.build(provider_impl).get())

        self._context.add(self._point, _producer)
        logger.debug('Bound %s to provider %s', self._point, provider_impl.__qualname__)
