from typing import Any, Callable

from makefun import wraps

from .injection import FunctionInjector, InjectionContext
from .point import InjectionPoint, T


class Injector(object):
    """Builds the graphs of objects that make up an application."""

    def __init__(self, context: InjectionContext):
        if context is None:
            raise ValueError('context cannot be none')
        self._context = context

    @property
    def context(self) -> InjectionContext:
        return self._context

    def get_instance(self, target: type[T], *markers: Any) -> T:
        producer = self._context.lookup(InjectionPoint.of(target, *markers))
        return producer()

    def inject_members(self, instance: T) -> T:
        self._context.builder.inject_members(type(instance), instance)
        return instance

    def wire(self, func: Callable) -> Callable:
        """Resolves the parameters of func annotated with Inject at each call.

        The returned function no longer exposes those parameters::

            @injector.wire
            def drive(car: Injected[Car], speed: int) -> None:
                ...

            drive(speed=90)
        """
        injector = FunctionInjector(func)

        @wraps(func, remove_args=injector.parameters)
        def _wrapper(*args, **kwargs):
            args, kwargs = injector(self._context, args, kwargs)
            return func(*args, **kwargs)

        return _wrapper
