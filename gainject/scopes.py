from .qualifiers import Annotation, annotate, is_annotation_present


class Singleton(Annotation):
    """Scope annotation: at most one instance per injection context."""


def singleton(cls: type) -> type:
    return annotate(Singleton)(cls)


def is_singleton(cls: type) -> bool:
    return is_annotation_present(cls, Singleton)
