import logging
from typing import Any, TYPE_CHECKING

from .core import ConstructionError, DependencyInjectionException, MemberAccessError
from .point import InjectionPoint, T
from .reflection import Constructor, declared_constructors, declared_fields, declared_methods, \
    force_accessible, hierarchy_from_root, is_overridden

if TYPE_CHECKING:
    from .injection import InjectionContext


logger = logging.getLogger(__name__)


class GraphBuilder(object):
    """Constructs instances and injects their fields and methods.

    Members are injected level by level from the root of the class hierarchy
    down to the built type, fields before methods. A method redeclared by a
    more derived class is skipped at its own level.
    """

    def __init__(self, context: 'InjectionContext'):
        self._context = context

    def build(self, impl: type[T]) -> T:
        return self._context.cached_or_build(impl, self._construct_and_inject)

    def _construct_and_inject(self, impl: type[T]) -> T:
        logger.debug('Building %s.%s', impl.__module__, impl.__qualname__)
        instance = self.construct(impl)
        self.inject_members(impl, instance)
        return instance

    def construct(self, impl: type[T]) -> T:
        constructor = injectable_constructor(impl)
        if not constructor.injectable:
            return constructor.create()
        values = [self._resolve(p, str(p), constructor.declaring_type) for p in constructor.parameters]
        return constructor.create(*values)

    def inject_members(self, impl: type[T], instance: T) -> None:
        for c in hierarchy_from_root(impl):
            try:
                fields = declared_fields(c)
            except MemberAccessError as e:
                raise ConstructionError(f"Injection failed: {e}", '__annotations__', c) from e
            for field in fields:
                if not field.injectable or field.is_final or field.is_static:
                    continue
                value = self._resolve(field, field.name, c)
                try:
                    force_accessible(field).set(instance, value)
                except MemberAccessError as e:
                    raise ConstructionError(f"Injection failed: {e}", field.name, c) from e

            for method in declared_methods(c):
                if not method.injectable or method.is_static or is_overridden(method, impl):
                    continue
                values = [self._resolve(p, str(p), c) for p in method.parameters]
                force_accessible(method).invoke(instance, *values)

    def _resolve(self, member, name: str, declaring_type: type) -> Any:
        try:
            point = InjectionPoint.of_member(member)
            return self._context.lookup(point)()
        except ConstructionError:
            raise
        except DependencyInjectionException as e:
            raise ConstructionError(f"Injection failed: {e}", name, declaring_type) from e


def injectable_constructor(impl: type) -> Constructor:
    constructors = declared_constructors(impl)
    for constructor in constructors:
        if constructor.injectable:
            return force_accessible(constructor)
    for constructor in constructors:
        if constructor.parameter_count == 0:
            return force_accessible(constructor)
    raise ConstructionError('No injectable constructor', '__init__', impl)
