import types
from typing import Annotated, Any, Generic, TypeVar, ParamSpec, TypeVarTuple, Union, get_args, get_origin

from .core import TypeTokenError, UsageError


T = TypeVar('T')


def direct_subclass(cls: type, holder: type, error: type[UsageError] = TypeTokenError) -> type:
    """Returns the class in the bases of ``cls`` that directly subclasses ``holder``."""
    for c in cls.__mro__:
        if holder in c.__bases__:
            return c
    raise error(f"Must subclass {holder.__name__}. [{cls.__qualname__}]")


def type_argument(subclass: type, holder: type, error: type[UsageError] = TypeTokenError) -> Any:
    """Returns the type argument the direct subclass passed to ``holder[...]``."""
    for base in subclass.__dict__.get('__orig_bases__', ()):
        if get_origin(base) is holder:
            arg = get_args(base)[0]
            if isinstance(arg, (TypeVar, ParamSpec, TypeVarTuple)):
                break
            return arg
    raise error(f"Missing type parameter. [{subclass.__qualname__}]")


def strip_annotated(tp: Any) -> Any:
    while get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    return tp


def raw_type_of(tp: Any) -> type | None:
    """The base class of a type, or None where there is none (type variables, Any)."""
    if tp is None:
        raise TypeTokenError('Type cannot be None.')
    if tp is Any or isinstance(tp, (TypeVar, ParamSpec, TypeVarTuple)):
        return None
    origin = get_origin(tp)
    if origin is Union or origin is types.UnionType:
        raise TypeTokenError(f"Illegal type, unions have no raw type. [{tp!r}]")
    if origin is not None:
        # list[int], Provider[Seat] and tuple[int, ...] all erase to their origin.
        if isinstance(origin, type):
            return origin
        raise TypeTokenError(f"Illegal type. [{tp!r}]")
    if isinstance(tp, type):
        return tp
    raise TypeTokenError(f"Illegal type. [{tp!r}]")


def type_name(tp: Any) -> str:
    if isinstance(tp, type) and get_origin(tp) is None:
        return f"{tp.__module__}.{tp.__qualname__}" if tp.__module__ != 'builtins' else tp.__qualname__
    return repr(tp)


class TypeToken(Generic[T]):
    """A (possibly parameterized) type usable as a lookup key.

    Build one with :meth:`of`, or capture a parameterization by subclassing::

        class StringList(TypeToken[list[str]]):
            pass

        token = StringList()
    """

    def __init__(self):
        subclass = direct_subclass(type(self), TypeToken)
        self._type = strip_annotated(type_argument(subclass, TypeToken))
        self._raw_type = raw_type_of(self._type)

    @classmethod
    def of(cls, tp: Any) -> 'TypeToken':
        if isinstance(tp, TypeToken):
            return tp
        tp = strip_annotated(tp)
        return _SimpleTypeToken(tp, raw_type_of(tp))

    @property
    def type(self) -> Any:
        return self._type

    @property
    def raw_type(self) -> 'type | None':
        return self._raw_type

    @property
    def parameter_types(self) -> tuple[Any, ...]:
        return get_args(self._type)

    def __hash__(self):
        return (31 * hash(self._type)) ^ hash(self._raw_type)

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, TypeToken):
            return False
        return self._raw_type == other._raw_type and self._type == other._type

    def __str__(self):
        return type_name(self._type)

    def __repr__(self):
        return f"TypeToken{{type={type_name(self._type)}, raw_type={type_name(self._raw_type)}}}"


class _SimpleTypeToken(TypeToken[T]):

    def __init__(self, tp: Any, raw_type: type | None):
        self._type = tp
        self._raw_type = raw_type
