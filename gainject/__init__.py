from .core import DependencyInjectionException, UsageError, TypeTokenError, AnnotationUsageError, BindingError, \
    DuplicateBindingError, ResolutionException, UnresolvedBindingError, InjectionException, ConstructionError, \
    MemberAccessError
from .typetoken import TypeToken
from .qualifiers import Annotation, AnnotationLiteral, Qualifier, qualifier, Named, named, annotate
from .inject import Inject, Injected, inject
from .scopes import Singleton, singleton, is_singleton
from .point import InjectionPoint
from .registry import BindingRegistry
from .providers import Provider
from .injection import InjectionContext
from .builder import GraphBuilder
from .injector import Injector
