from abc import ABC, abstractmethod

import pytest

from simpleioc import Binding, DefaultBinding, Kernel, ResolveError, Scope


class Vehicle(ABC):
    @abstractmethod
    def name(self) -> str: ...


class Car(Vehicle):
    def name(self) -> str:
        return "car"


def test_resolve_autowires_simple_type():
    kernel = Kernel()

    class A: ...

    obj = kernel.resolve(A)
    assert isinstance(obj, A)


def test_resolve_unbound_type_reuses_default_binding():
    kernel = Kernel()

    class A: ...

    a1 = kernel.resolve(A)
    a2 = kernel.resolve(A)

    defaults = [b for b in kernel.bindings if isinstance(b, DefaultBinding)]
    assert len(defaults) == 1
    assert defaults[0].scope is Scope.TRANSIENT
    assert a1 is not a2


def test_default_binding_is_created_for_dependencies_too():
    kernel = Kernel()

    class DB: ...

    class Repo:
        def __init__(self, db: DB):
            self.db = db

    kernel.resolve(Repo)
    kernel.resolve(Repo)

    assert [b.bound_type for b in kernel.bindings] == [Repo, DB]


def test_resolve_bound_interface_to_type():
    kernel = Kernel()
    kernel.bind(Vehicle).to_type(Car)

    vehicle = kernel.resolve(Vehicle)

    assert isinstance(vehicle, Car)
    assert vehicle.name() == "car"


def test_bind_returns_configurator_for_registered_binding():
    kernel = Kernel()

    configurator = kernel.bind(Vehicle)

    assert kernel.bindings == (configurator.binding,)
    assert isinstance(configurator.binding, Binding)
    assert configurator.binding.bound_type is Vehicle
    assert configurator.binding.target_type is Vehicle


def test_bind_keeps_registration_order():
    kernel = Kernel()

    first = kernel.bind(Vehicle).to_type(Car).binding
    second = kernel.bind(Car).to_self().binding

    assert kernel.bindings == (first, second)


def test_resolve_unbound_abstract_type_raises():
    kernel = Kernel()

    with pytest.raises(ResolveError) as ctx:
        kernel.resolve(Vehicle)

    assert "No matching binding found" in str(ctx.value)
    assert kernel.bindings == ()


def test_resolve_error_is_a_runtime_error():
    kernel = Kernel()

    with pytest.raises(RuntimeError):
        kernel.resolve(Vehicle)


def test_resolve_with_factory_closure_over_kernel():
    kernel = Kernel()

    class Settings:
        def __init__(self, url: str):
            self.url = url

    class Database:
        def __init__(self, settings: Settings):
            self.settings = settings

    kernel.bind(Settings).to_factory(lambda: Settings("sqlite://")).in_singleton_scope()
    kernel.bind(Database).to_factory(lambda: Database(kernel.resolve(Settings)))

    assert kernel.resolve(Database).settings.url == "sqlite://"


def test_binding_repr_describes_configuration():
    kernel = Kernel()

    class Person:
        def __init__(self, vehicle: Vehicle):
            self.vehicle = vehicle

    binding = kernel.bind(Vehicle).to_type(Car).in_singleton_scope().when_injected_exactly_into(Person).binding

    assert repr(binding) == (
        "Binding(Vehicle, to=Car, singleton, exactly_into=test_binding_repr_describes_configuration.<locals>.Person)"
    )
