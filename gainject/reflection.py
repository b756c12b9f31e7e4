"""Enumeration of the members a class declares, for the graph builder.

Python has no access modifiers, so visibility follows naming: ``__name``
(mangled) is private, ``_name`` is restricted to the declaring package and
everything else is public. ``Final[...]`` marks an immutable field,
``ClassVar[...]``, ``staticmethod`` and ``classmethod`` mark type-level state and
``@typing.final`` marks a method that can never be overridden.
"""
import enum
import inspect
import logging
import sys
import typing
from typing import Annotated, Any, ClassVar, Final, Callable, get_origin

from .core import ConstructionError, DependencyInjectionException, MemberAccessError
from .inject import Inject
from .qualifiers import Annotation, as_annotation, declared_annotations


logger = logging.getLogger(__name__)


class Visibility(enum.Enum):
    PUBLIC = 'public'
    RESTRICTED = 'restricted'
    PRIVATE = 'private'


def _demangle(owner: type, name: str) -> str:
    prefix = '_' + owner.__name__.lstrip('_') + '__'
    if name.startswith(prefix) and len(name) > len(prefix):
        return '__' + name[len(prefix):]
    return name


def visibility_of(owner: type, name: str) -> Visibility:
    name = _demangle(owner, name)
    if name.startswith('__') and name.endswith('__'):
        return Visibility.PUBLIC
    if name.startswith('__'):
        return Visibility.PRIVATE
    if name.startswith('_'):
        return Visibility.RESTRICTED
    return Visibility.PUBLIC


def package_of(cls: type) -> str:
    return cls.__module__.rpartition('.')[0]


def _markers(raw: typing.Iterable[Any]) -> tuple[Annotation, ...]:
    return tuple(a for a in (as_annotation(m) for m in raw) if a is not None)


def _is_inject(annotations: typing.Iterable[Annotation]) -> bool:
    return any(a.kind() is Inject for a in annotations)


def _unwrap_hint(hint: Any) -> tuple[Any, list[Any], bool, bool]:
    """Splits a declared hint into (type, markers, is_final, is_static)."""
    markers = []
    final = static = False
    while True:
        origin = get_origin(hint)
        if origin is Annotated:
            markers.extend(hint.__metadata__)
            hint = hint.__origin__
        elif origin is Final or origin is ClassVar:
            final = final or origin is Final
            static = static or origin is ClassVar
            hint = typing.get_args(hint)[0]
        elif hint is Final or hint is ClassVar:
            return None, markers, final or hint is Final, static or hint is ClassVar
        else:
            return hint, markers, final, static


M = typing.TypeVar('M', bound='Member')


class Member(object):

    def __init__(self, name: str, declaring_type: type, annotations: tuple[Annotation, ...]):
        self._name = name
        self._declaring_type = declaring_type
        self._annotations = annotations
        self.accessible = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def declaring_type(self) -> type:
        return self._declaring_type

    @property
    def annotations(self) -> tuple[Annotation, ...]:
        return self._annotations

    @property
    def visibility(self) -> Visibility:
        return visibility_of(self._declaring_type, self._name)

    @property
    def injectable(self) -> bool:
        return _is_inject(self._annotations)

    def __str__(self):
        return f"{self._declaring_type.__qualname__}.{_demangle(self._declaring_type, self._name)}"


class Parameter(object):

    def __init__(self, owner: str, parameter: inspect.Parameter, hint: Any):
        self._owner = owner
        self._parameter = parameter
        self._type, raw, _, _ = _unwrap_hint(hint)
        self._annotations = _markers(raw)

    @property
    def name(self) -> str:
        return self._parameter.name

    @property
    def kind(self):
        return self._parameter.kind

    @property
    def type(self) -> Any:
        return self._type

    @property
    def annotations(self) -> tuple[Annotation, ...]:
        return self._annotations

    @property
    def injectable(self) -> bool:
        return _is_inject(self._annotations)

    def __str__(self):
        return f"{self._owner}:{self.name}"


def _parameters(owner: str, func: Callable, skip_first: bool) -> tuple[Parameter, ...]:
    try:
        hints = typing.get_type_hints(func, include_extras=True)
    except NameError as e:
        raise ConstructionError(f"Cannot evaluate annotations of {owner}") from e
    params = list(inspect.signature(func).parameters.values())
    if skip_first:
        params = params[1:]
    result = []
    for p in params:
        if p.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if p.name not in hints:
            raise ConstructionError(f"Parameter {owner}:{p.name} has no type annotation")
        result.append(Parameter(owner, p, hints[p.name]))
    return tuple(result)


def call_arguments(parameters: typing.Sequence[Parameter], values: typing.Sequence[Any]) \
        -> tuple[tuple[Any, ...], dict[str, Any]]:
    args = []
    kwargs = {}
    for param, value in zip(parameters, values):
        if param.kind == inspect.Parameter.KEYWORD_ONLY:
            kwargs[param.name] = value
        else:
            args.append(value)
    return tuple(args), kwargs


class Field(Member):

    def __init__(self, name: str, declaring_type: type, hint: Any):
        self._type, raw, self._final, self._static = _unwrap_hint(hint)
        super(Field, self).__init__(name, declaring_type, _markers(raw))

    @property
    def type(self) -> Any:
        return self._type

    @property
    def is_final(self) -> bool:
        return self._final

    @property
    def is_static(self) -> bool:
        return self._static

    def set(self, target: Any, value: Any) -> None:
        try:
            if self.accessible:
                object.__setattr__(target, self._name, value)
            else:
                setattr(target, self._name, value)
        except (AttributeError, TypeError) as e:
            raise MemberAccessError(f"Cannot set field {self}") from e


class Method(Member):

    def __init__(self, name: str, declaring_type: type, function: Callable, static: bool):
        super(Method, self).__init__(name, declaring_type, declared_annotations(function))
        self._function = function
        self._static = static
        self._parameters = None

    @property
    def function(self) -> Callable:
        return self._function

    @property
    def is_static(self) -> bool:
        return self._static

    @property
    def is_final(self) -> bool:
        return getattr(self._function, '__final__', False)

    @property
    def parameters(self) -> tuple[Parameter, ...]:
        if self._parameters is None:
            self._parameters = _parameters(str(self), self._function, skip_first=not self._static)
        return self._parameters

    def invoke(self, target: Any, *values: Any) -> Any:
        args, kwargs = call_arguments(self.parameters, values)
        try:
            if self._static:
                return self._function(*args, **kwargs)
            return self._function(target, *args, **kwargs)
        except DependencyInjectionException:
            raise
        except Exception as e:
            raise ConstructionError(f"Method invocation failed: {e!r}",
                                    _demangle(self._declaring_type, self._name), self._declaring_type) from e


class Constructor(Member):

    def __init__(self, target: type, declaring_type: type, function: Callable | None):
        annotations = declared_annotations(function) if function is not None else ()
        super(Constructor, self).__init__('__init__', declaring_type, annotations)
        self._target = target
        self._function = function
        self._parameters = None

    @property
    def parameters(self) -> tuple[Parameter, ...]:
        if self._parameters is None:
            if self._function is None:
                self._parameters = ()
            else:
                self._parameters = _parameters(str(self), self._function, skip_first=True)
        return self._parameters

    @property
    def parameter_count(self) -> int:
        """Number of parameters that must be supplied by the caller."""
        if self._function is None:
            return 0
        return sum(1 for p in list(inspect.signature(self._function).parameters.values())[1:]
                   if p.default is inspect.Parameter.empty
                   and p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD))

    def create(self, *values: Any) -> Any:
        """Calls the constructor; without values no parameter is inspected."""
        args, kwargs = call_arguments(self.parameters, values) if values else ((), {})
        try:
            return self._target(*args, **kwargs)
        except DependencyInjectionException:
            raise
        except Exception as e:
            raise ConstructionError(f"Construction failed: {e!r}", '__init__', self._target) from e


def declared_constructors(cls: type) -> list[Constructor]:
    """The effective constructor of a class; a default one where only object's exists."""
    for c in cls.__mro__:
        if '__init__' in vars(c):
            if c is object:
                break
            return [Constructor(cls, c, vars(c)['__init__'])]
    return [Constructor(cls, cls, None)]


def _evaluate(cls: type, hint: Any) -> Any:
    if not isinstance(hint, str):
        return hint
    module = sys.modules.get(cls.__module__)
    return eval(hint, getattr(module, '__dict__', {}), dict(vars(cls)))


def declared_fields(cls: type) -> list[Field]:
    """Fields annotated in the class body.

    A string annotation that cannot be evaluated is skipped unless it names
    the Inject marker, which raises MemberAccessError.
    """
    fields = []
    for name, hint in inspect.get_annotations(cls).items():
        try:
            hint = _evaluate(cls, hint)
        except (NameError, AttributeError) as e:
            if Inject.__name__ in hint:
                raise MemberAccessError(f"Cannot evaluate annotation of {cls.__qualname__}.{name}") from e
            logger.debug('Skipping field %s.%s, annotation %r is unresolved', cls.__qualname__, name, hint)
            continue
        fields.append(Field(name, cls, hint))
    return fields


def declared_methods(cls: type) -> list[Method]:
    methods = []
    for name, value in vars(cls).items():
        if name.startswith('__') and name.endswith('__'):
            continue
        if isinstance(value, (staticmethod, classmethod)):
            methods.append(Method(name, cls, value.__func__, static=True))
        elif inspect.isfunction(value):
            methods.append(Method(name, cls, value, static=False))
    return methods


def hierarchy_from_root(cls: type) -> list[type]:
    return [c for c in reversed(cls.__mro__) if c is not object]


def is_overridden(method: Method, leaf: type) -> bool:
    """Whether a class between the method's declaring class and leaf redeclares it."""
    if method.visibility is Visibility.PRIVATE or method.is_final:
        return False
    if method.visibility is Visibility.RESTRICTED and package_of(method.declaring_type) != package_of(leaf):
        return False
    for c in leaf.__mro__:
        if method.name in vars(c):
            return c is not method.declaring_type
    return False


def force_accessible(member: M) -> M:
    member.accessible = True
    return member
