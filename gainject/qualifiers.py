import array
import functools
import inspect
import types
from typing import Any, Callable, Generic, TypeVar

from .core import AnnotationUsageError
from .typetoken import direct_subclass, type_argument


MARKERS: str = '__markers__'

_ARRAY_TYPES = (list, tuple, bytes, bytearray, array.array)


class Annotation(object):
    """Base of every annotation kind and of every annotation instance.

    A kind is a plain subclass whose zero-argument methods are its members::

        @qualifier
        class Color(Annotation):
            def value(self) -> str:
                raise NotImplementedError()

    Instances are created from :class:`AnnotationLiteral`.
    """

    def kind(self) -> type['Annotation']:
        raise NotImplementedError()


K = TypeVar('K', bound=Annotation)


def is_kind(obj: Any) -> bool:
    return isinstance(obj, type) and issubclass(obj, Annotation) \
        and obj is not Annotation and not issubclass(obj, AnnotationLiteral)


@functools.cache
def members_of(kind: type[Annotation]) -> tuple[str, ...]:
    """Names of the members declared in the body of an annotation kind."""
    names = []
    for name, value in vars(kind).items():
        if name.startswith('_') or not inspect.isfunction(value):
            continue
        if len(inspect.signature(value).parameters) == 1:
            names.append(name)
    return tuple(sorted(names))


def _read(annotation: Annotation, name: str) -> Any:
    try:
        return getattr(annotation, name)()
    except Exception as e:
        raise AnnotationUsageError(
            f"Error checking value of member {name} on {annotation.kind().__qualname__}") from e


def _is_array(value: Any) -> bool:
    return isinstance(value, _ARRAY_TYPES)


def _member_equals(this: Any, that: Any) -> bool:
    if _is_array(this) and _is_array(that):
        return len(this) == len(that) and all(_member_equals(a, b) for a, b in zip(this, that))
    return this == that


def _member_hash(value: Any) -> int:
    if _is_array(value):
        return hash(tuple(_member_hash(v) for v in value))
    return hash(value)


class AnnotationLiteral(Annotation, Generic[K]):
    """Instance of an annotation kind.

    Subclass it with the kind as type argument, implementing the kind::

        class DriversLiteral(AnnotationLiteral[Drivers], Drivers):
            pass

    or let :meth:`of` build the class from member values.
    """

    def __init__(self):
        subclass = direct_subclass(type(self), AnnotationLiteral, AnnotationUsageError)
        kind = type_argument(subclass, AnnotationLiteral, AnnotationUsageError)
        if not is_kind(kind):
            raise AnnotationUsageError(f"{kind!r} is not an annotation kind.")
        self._kind: type[Annotation] = kind
        self._members: tuple[str, ...] | None = None
        self._hash: int | None = None

    @classmethod
    def of(cls, kind: type[K], **values: Any) -> K:
        members = members_of(kind)
        unknown = set(values).difference(members)
        if unknown:
            raise AnnotationUsageError(f"{kind.__qualname__} has no members {', '.join(sorted(unknown))}.")
        missing = set(members).difference(values)
        if missing:
            raise AnnotationUsageError(f"{kind.__qualname__} requires members {', '.join(sorted(missing))}.")
        return _literal_class(kind)(**values)

    def use_strict(self) -> 'AnnotationLiteral[K]':
        if not isinstance(self, self._kind):
            raise AnnotationUsageError(
                f"{type(self).__qualname__} does not implement the annotation type {self._kind.__qualname__}")
        return self

    def kind(self) -> type[Annotation]:
        return self._kind

    def _get_members(self) -> tuple[str, ...]:
        if self._members is None:
            members = members_of(self._kind)
            if len(members) > 0 and not isinstance(self, self._kind):
                raise AnnotationUsageError(
                    f"{type(self).__qualname__} does not implement the annotation type with members "
                    f"{self._kind.__qualname__}")
            self._members = members
        return self._members

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, AnnotationLiteral):
            return False
        if self._kind != other.kind():
            return False
        for name in self._get_members():
            if not _member_equals(_read(self, name), _read(other, name)):
                return False
        return True

    def __hash__(self):
        if self._hash is None:
            hash_code = hash(self._kind)
            for name in self._get_members():
                hash_code += (127 * hash(name)) ^ _member_hash(_read(self, name))
            self._hash = hash_code
        return self._hash

    def __repr__(self):
        values = ', '.join(f"{name}={_read(self, name)!r}" for name in self._get_members())
        return f"@{self._kind.__qualname__}({values})"


@functools.cache
def _literal_class(kind: type[K]) -> type[AnnotationLiteral]:

    def _init(self, **values):
        self._values = values
        AnnotationLiteral.__init__(self)

    def _body(ns: dict) -> None:
        ns['__init__'] = _init
        ns['__module__'] = kind.__module__
        for name in members_of(kind):
            ns[name] = lambda self, _name=name: self._values[_name]

    return types.new_class(f"{kind.__name__}Literal", (AnnotationLiteral[kind], kind), exec_body=_body)


def as_annotation(obj: Any) -> Annotation | None:
    """Normalizes a marker: member-less kinds stand for their own literal, foreign objects give None."""
    if isinstance(obj, Annotation):
        return obj
    if is_kind(obj):
        if members_of(obj):
            raise AnnotationUsageError(f"{obj.__qualname__} has members, use AnnotationLiteral.of().")
        return AnnotationLiteral.of(obj)
    return None


def annotate(*markers: Any) -> Callable:
    """Decorator declaring annotations on a class or function."""
    annotations = []
    for m in markers:
        a = as_annotation(m)
        if a is None:
            raise AnnotationUsageError(f"{m!r} is not an annotation.")
        annotations.append(a)

    def _decorator(target):
        setattr(getattr(target, '__func__', target), MARKERS, declared_annotations(target) + tuple(annotations))
        return target

    return _decorator


def declared_annotations(obj: Any) -> tuple[Annotation, ...]:
    """Annotations declared directly on obj, never inherited from a base class."""
    obj = getattr(obj, '__func__', obj)
    return getattr(obj, '__dict__', {}).get(MARKERS, ())


def is_annotation_present(obj: Any, kind: type[Annotation]) -> bool:
    return any(a.kind() is kind for a in declared_annotations(obj))


class Qualifier(Annotation):
    """Meta annotation: a kind carrying it narrows binding lookup."""


def qualifier(kind: type[K]) -> type[K]:
    return annotate(Qualifier)(kind)


def is_qualifier(annotation: Annotation) -> bool:
    return is_annotation_present(annotation.kind(), Qualifier)


@qualifier
class Named(Annotation):

    def value(self) -> str:
        raise NotImplementedError()


def named(value: str) -> Named:
    return AnnotationLiteral.of(Named, value=value)
