import inspect

import pytest

from gainject import ConstructionError, MemberAccessError, named
from gainject.reflection import Visibility, declared_constructors, declared_fields, declared_methods, \
    force_accessible, hierarchy_from_root, is_overridden, package_of, visibility_of

from tests.accessories.garage import ForeignDerived
from tests.auto import Base, Car, Convertible, Derived, Engine, FuelTank, InjectedLedger, Intermediate, Leaf, Ledger, \
    NoInjectableConstructor, Seat, Sized, SpareTire, Tire, RoundThing, V8Engine


def methods(cls):
    return {m.name: m for m in declared_methods(cls)}


def test_hierarchy_from_root():
    assert hierarchy_from_root(SpareTire) == [RoundThing, Tire, SpareTire]
    assert hierarchy_from_root(Seat) == [Seat]


def test_declared_constructors_injectable():
    [constructor] = declared_constructors(Convertible)
    assert constructor.injectable
    assert constructor.declaring_type is Convertible
    assert [p.name for p in constructor.parameters] == ['engine', 'tank']
    assert [p.type for p in constructor.parameters] == [Engine, FuelTank]
    assert constructor.parameter_count == 2


def test_declared_constructors_inherited_and_default():
    [inherited] = declared_constructors(V8Engine)
    assert inherited.declaring_type is Engine
    assert not inherited.injectable
    assert inherited.parameter_count == 0

    [default] = declared_constructors(Seat)
    assert default.parameters == ()
    assert isinstance(default.create(), Seat)

    [required] = declared_constructors(NoInjectableConstructor)
    assert required.parameter_count == 1


def test_declared_fields():
    fields = {f.name: f for f in declared_fields(Convertible)}
    assert list(fields) == ['wheels', 'model', 'spare', 'seat_provider', 'drivers_seat_provider']
    assert fields['wheels'].is_static and not fields['wheels'].is_final
    assert fields['model'].is_final and not fields['model'].is_static
    assert fields['wheels'].injectable and fields['model'].injectable
    assert fields['spare'].type is Tire
    assert named('spare') in fields['spare'].annotations
    assert not fields['spare'].is_final and not fields['spare'].is_static


def test_declared_fields_are_per_class():
    assert [f.name for f in declared_fields(Car)] == ['seat']
    assert 'seat' not in [f.name for f in declared_fields(Convertible)]


def test_declared_methods():
    found = methods(Base)
    assert list(found) == ['install', '_tune', '_Base__lock', 'check', 'paint']
    assert all(m.injectable for m in found.values())
    assert found['check'].is_final
    assert not found['install'].is_final
    assert found['install'].parameters == ()


def test_declared_methods_static():
    class WithStatic:
        @staticmethod
        def make() -> None:
            pass

        @classmethod
        def build(cls) -> None:
            pass

    assert all(m.is_static for m in declared_methods(WithStatic))


@pytest.mark.parametrize('name, visibility', [
    pytest.param('install', Visibility.PUBLIC, id='public'),
    pytest.param('_tune', Visibility.RESTRICTED, id='restricted'),
    pytest.param('_Base__lock', Visibility.PRIVATE, id='private'),
    pytest.param('__init__', Visibility.PUBLIC, id='dunder'),
])
def test_visibility_of(name, visibility):
    assert visibility_of(Base, name) is visibility


def test_package_of():
    assert package_of(Base) == 'tests'
    assert package_of(ForeignDerived) == 'tests.accessories'


@pytest.mark.parametrize('leaf, name, overridden', [
    pytest.param(Derived, 'install', True, id='public'),
    pytest.param(Derived, '_tune', True, id='restricted-same-package'),
    pytest.param(Derived, '_Base__lock', False, id='private'),
    pytest.param(Derived, 'check', False, id='final'),
    pytest.param(Derived, 'paint', True, id='redeclared-without-inject'),
    pytest.param(ForeignDerived, '_tune', False, id='restricted-other-package'),
    pytest.param(ForeignDerived, 'install', True, id='public-other-package'),
    pytest.param(ForeignDerived, 'paint', False, id='not-redeclared'),
    pytest.param(Leaf, 'install', True, id='grandchild'),
    pytest.param(Base, 'install', False, id='self'),
])
def test_is_overridden(leaf, name, overridden):
    assert is_overridden(methods(Base)[name], leaf) is overridden


def test_is_overridden_intermediate():
    assert is_overridden(methods(Intermediate)['install'], Leaf)
    assert not is_overridden(methods(Leaf)['install'], Leaf)


def test_Field_set():
    class Frozen:
        __slots__ = ('value',)

        def __setattr__(self, name, value):
            raise AttributeError('frozen')

    field = declared_fields(Convertible)[2]
    target = Frozen()
    with pytest.raises(MemberAccessError):
        field.set(target, 1)
    with pytest.raises(MemberAccessError):
        force_accessible(field).set(target, 1)


def test_Field_set_forced_bypasses_setattr():
    class Guarded:
        spare: Tire

        def __setattr__(self, name, value):
            raise AttributeError('read only')

    [field] = declared_fields(Guarded)
    target = Guarded()
    with pytest.raises(MemberAccessError):
        field.set(target, 'tire')
    force_accessible(field).set(target, 'tire')
    assert target.spare == 'tire'


def test_Method_invoke_wraps_failures():
    class Failing:
        def run(self, value: int) -> None:
            raise ValueError(value)

    [method] = declared_methods(Failing)
    with pytest.raises(ConstructionError) as err:
        method.invoke(Failing(), 3)
    assert err.value.member == 'run'
    assert err.value.declaring_type is Failing
    assert isinstance(err.value.__cause__, ValueError)


def test_parameters_require_annotations():
    class Untyped:
        def run(self, value) -> None:
            pass

    [method] = declared_methods(Untyped)
    with pytest.raises(ConstructionError):
        _ = method.parameters


def test_parameters_skip_variadic():
    class Variadic:
        def run(self, value: int, *args: int, flag: bool, **kwargs: str) -> None:
            pass

    [method] = declared_methods(Variadic)
    assert [(p.name, p.kind) for p in method.parameters] == [
        ('value', inspect.Parameter.POSITIONAL_OR_KEYWORD),
        ('flag', inspect.Parameter.KEYWORD_ONLY),
    ]


def test_declared_fields_skips_unresolved_annotations():
    assert [f.name for f in declared_fields(Ledger)] == ['tank']
    with pytest.raises(MemberAccessError):
        declared_fields(InjectedLedger)


def test_Constructor_create_without_values_ignores_parameters():
    [constructor] = declared_constructors(Sized)
    assert constructor.parameter_count == 0
    assert constructor.create().size == 3
    with pytest.raises(ConstructionError):
        constructor.parameters
