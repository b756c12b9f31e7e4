import pytest

from gainject import InjectionContext, Injector, Provider, named

from tests.auto import Car, Drivers, DriversSeat, DriversSeatProvider, Engine, FuelTank, Seat, SeatProvider, \
    SpareTire, Tire, V8Engine


@pytest.fixture
def context() -> InjectionContext:
    context = InjectionContext()
    context.binding_for(Car).map(Car)
    context.binding_for(Engine).map(V8Engine)
    context.binding_for(V8Engine).map(V8Engine)
    context.binding_for(Seat).map(Seat)
    context.binding_for(Seat, Drivers).map(DriversSeat)
    context.binding_for(DriversSeat).map(DriversSeat)
    context.binding_for(Tire).map(Tire)
    context.binding_for(Tire, named('spare')).map(SpareTire)
    context.binding_for(FuelTank).map(FuelTank)
    context.binding_for(Provider[Seat]).map(SeatProvider)
    context.binding_for(Provider[Seat], Drivers).map(DriversSeatProvider)
    return context


@pytest.fixture
def injector(context) -> Injector:
    return Injector(context)
