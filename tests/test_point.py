from typing import Annotated

import pytest

from gainject import AnnotationLiteral, Inject, InjectionPoint, Provider, TypeToken, named
from gainject.reflection import declared_fields

from tests.auto import Car, Convertible, Drivers, DriversLiteral, Label, Seat, Tire


def test_InjectionPoint_of():
    point = InjectionPoint.of(Seat)
    assert point.token == TypeToken.of(Seat)
    assert point.qualifiers == frozenset()


def test_InjectionPoint_keeps_only_qualifiers():
    drivers = DriversLiteral().use_strict()
    point = InjectionPoint.of(Seat, drivers, AnnotationLiteral.of(Inject), Label, 'foreign metadata')
    assert point.qualifiers == frozenset({drivers})


@pytest.mark.parametrize('first, second', [
    pytest.param(InjectionPoint.of(Seat), InjectionPoint.of(Seat, Inject), id='unqualified'),
    pytest.param(InjectionPoint.of(Seat, Drivers), InjectionPoint.of(Seat, DriversLiteral()), id='kind-literal'),
    pytest.param(InjectionPoint.of(Seat, Drivers, named('a')), InjectionPoint.of(Seat, named('a'), Drivers),
                 id='order'),
    pytest.param(InjectionPoint.of(Annotated[Seat, Drivers]), InjectionPoint.of(Seat), id='annotated-type'),
    pytest.param(InjectionPoint.of(Provider[Seat]), InjectionPoint(TypeToken.of(Provider[Seat])), id='token'),
])
def test_InjectionPoint_equals(first, second):
    assert first == second
    assert hash(first) == hash(second)


@pytest.mark.parametrize('first, second', [
    pytest.param(InjectionPoint.of(Seat), InjectionPoint.of(Seat, Drivers), id='qualified'),
    pytest.param(InjectionPoint.of(Seat, named('a')), InjectionPoint.of(Seat, named('b')), id='named'),
    pytest.param(InjectionPoint.of(Seat), InjectionPoint.of(Car), id='type'),
    pytest.param(InjectionPoint.of(list[str]), InjectionPoint.of(list[int]), id='parameterized'),
])
def test_InjectionPoint_not_equals(first, second):
    assert first != second


def test_InjectionPoint_of_member():
    fields = {f.name: f for f in declared_fields(Convertible)}
    assert InjectionPoint.of_member(fields['spare']) == InjectionPoint.of(Tire, named('spare'))
    assert InjectionPoint.of_member(fields['drivers_seat_provider']) == InjectionPoint.of(Provider[Seat], Drivers)
    seat = declared_fields(Car)[0]
    assert InjectionPoint.of_member(seat) == InjectionPoint.of(Seat, Drivers)


def test_InjectionPoint_str():
    assert str(InjectionPoint.of(Seat)) == 'tests.auto.Seat[]'
    assert str(InjectionPoint.of(Seat, named('spare'))) == "tests.auto.Seat[@Named(value='spare')]"


def test_InjectionPoint_requires_token():
    with pytest.raises(ValueError):
        InjectionPoint(None)
