from typing import Any, Generic, TypeVar

from .qualifiers import Annotation, as_annotation, is_qualifier
from .typetoken import TypeToken


T = TypeVar('T')


class InjectionPoint(Generic[T]):
    """A type and its qualifiers, the key of a binding.

    Markers whose kind is not a qualifier are dropped, they never affect lookup.
    """

    def __init__(self, token: TypeToken[T], *markers: Any):
        if token is None:
            raise ValueError('token cannot be none')
        self._token = token
        qualifiers = (as_annotation(m) for m in markers)
        self._qualifiers: frozenset[Annotation] = frozenset(
            q for q in qualifiers if q is not None and is_qualifier(q))

    @classmethod
    def of(cls, target: Any, *markers: Any) -> 'InjectionPoint':
        return cls(TypeToken.of(target), *markers)

    @classmethod
    def of_member(cls, member) -> 'InjectionPoint':
        """Point of a field or parameter descriptor, from its declared type and markers."""
        return cls(TypeToken.of(member.type), *member.annotations)

    @property
    def token(self) -> TypeToken[T]:
        return self._token

    @property
    def qualifiers(self) -> frozenset[Annotation]:
        return self._qualifiers

    def __hash__(self):
        return (103 + hash(self._token)) ^ hash(self._qualifiers)

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, InjectionPoint):
            return False
        return self._token == other._token and self._qualifiers == other._qualifiers

    def __str__(self):
        qualifiers = ','.join(sorted(repr(q) for q in self._qualifiers))
        return f"{self._token}[{qualifiers}]"

    def __repr__(self):
        return f"InjectionPoint({self})"
