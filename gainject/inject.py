from typing import Annotated, Callable, TypeVar

from .qualifiers import Annotation, annotate


F = TypeVar('F', bound=Callable)
T = TypeVar('T')


class Inject(Annotation):
    """Marks a constructor, method or field as an injection target.

    Fields are marked through their annotation, ``seat: Annotated[Seat, Inject]``.
    """


def inject(func: F) -> F:
    return annotate(Inject)(func)


class InjectedGenerator(object):

    def __getitem__(self, item: type[T]) -> type[T]:
        return Annotated[item, Inject]


Injected = InjectedGenerator()
