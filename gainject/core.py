class DependencyInjectionException(Exception):
    pass


class UsageError(DependencyInjectionException):
    """Raised for misuse of the declaration API. Never retried."""


class TypeTokenError(UsageError):
    pass


class AnnotationUsageError(UsageError):
    pass


class BindingError(UsageError):
    pass


class DuplicateBindingError(BindingError):

    def __init__(self, point):
        super(DuplicateBindingError, self).__init__(f"Binding for {point} is already declared.")
        self.point = point


class ResolutionException(DependencyInjectionException):
    pass


class UnresolvedBindingError(ResolutionException):

    def __init__(self, point):
        super(UnresolvedBindingError, self).__init__(f"Unresolved binding [{point}].")
        self.point = point


class InjectionException(DependencyInjectionException):
    pass


class ConstructionError(InjectionException):

    def __init__(self, message: str, member: str | None = None, declaring_type: type | None = None):
        if member is not None:
            owner = declaring_type.__qualname__ if declaring_type is not None else '?'
            message = f"{message} [{owner}.{member}]"
        super(ConstructionError, self).__init__(message)
        self.member = member
        self.declaring_type = declaring_type


class MemberAccessError(InjectionException):
    pass
