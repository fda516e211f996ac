import unittest
from abc import ABC, abstractmethod

import pytest

from simpleioc import DefaultBinding, Kernel, ResolveError


class Vehicle(ABC):
    @abstractmethod
    def name(self) -> str: ...


class Car(Vehicle):
    def name(self) -> str:
        return "car"


class Motorcycle(Vehicle):
    def name(self) -> str:
        return "motorcycle"


class Truck(Vehicle):
    def name(self) -> str:
        return "truck"


class Person:
    def __init__(self, vehicle: Vehicle):
        self.vehicle = vehicle


class CoolPerson(Person): ...


class CoolerPerson(CoolPerson): ...


class TestInjectionConstraintPrecedence(unittest.TestCase):
    kernel: Kernel

    def setUp(self):
        self.kernel = Kernel()

    def test_constrained_binding_wins_inside_its_target(self):
        self.kernel.bind(Vehicle).to_type(Car)
        self.kernel.bind(Vehicle).to_type(Motorcycle).in_transient_scope().when_injected_into(CoolPerson)

        assert isinstance(self.kernel.resolve(CoolPerson).vehicle, Motorcycle)
        assert isinstance(self.kernel.resolve(Person).vehicle, Car)

    def test_constrained_binding_wins_even_when_registered_first(self):
        self.kernel.bind(Vehicle).to_type(Motorcycle).when_injected_into(CoolPerson)
        self.kernel.bind(Vehicle).to_type(Car)

        assert isinstance(self.kernel.resolve(CoolPerson).vehicle, Motorcycle)
        assert isinstance(self.kernel.resolve(Person).vehicle, Car)

    def test_injected_into_matches_subclasses_of_target(self):
        self.kernel.bind(Vehicle).to_type(Car)
        self.kernel.bind(Vehicle).to_type(Motorcycle).when_injected_into(CoolPerson)

        assert isinstance(self.kernel.resolve(CoolerPerson).vehicle, Motorcycle)

    def test_injected_exactly_into_rejects_subclasses_of_target(self):
        self.kernel.bind(Vehicle).to_type(Car)
        self.kernel.bind(Vehicle).to_type(Motorcycle).when_injected_exactly_into(CoolPerson)

        assert isinstance(self.kernel.resolve(CoolPerson).vehicle, Motorcycle)
        assert isinstance(self.kernel.resolve(CoolerPerson).vehicle, Car)

    def test_exact_constraint_wins_over_subtype_constraint(self):
        self.kernel.bind(Vehicle).to_type(Motorcycle).when_injected_into(CoolPerson)
        self.kernel.bind(Vehicle).to_type(Truck).when_injected_exactly_into(CoolPerson)

        assert isinstance(self.kernel.resolve(CoolPerson).vehicle, Truck)
        assert isinstance(self.kernel.resolve(CoolerPerson).vehicle, Motorcycle)

    def test_first_registered_binding_wins_within_a_tier(self):
        self.kernel.bind(Vehicle).to_type(Car)
        self.kernel.bind(Vehicle).to_type(Truck)

        assert isinstance(self.kernel.resolve(Vehicle), Car)

    def test_constrained_binding_is_not_used_without_injection_target(self):
        self.kernel.bind(Vehicle).to_type(Motorcycle).when_injected_into(CoolPerson)

        with pytest.raises(ResolveError):
            self.kernel.resolve(Vehicle)

    def test_constrained_binding_without_alternative_fails_outside_its_target(self):
        self.kernel.bind(Vehicle).to_type(Motorcycle).when_injected_exactly_into(CoolPerson)

        with pytest.raises(ResolveError):
            self.kernel.resolve(Person)


class TestFindMatchingBinding(unittest.TestCase):
    kernel: Kernel

    def setUp(self):
        self.kernel = Kernel()

    def test_returns_configured_binding_for_target(self):
        unconstrained = self.kernel.bind(Vehicle).to_type(Car).binding
        constrained = self.kernel.bind(Vehicle).to_type(Truck).when_injected_into(CoolPerson).binding

        assert self.kernel.find_matching_binding(Vehicle, CoolerPerson) is constrained
        assert self.kernel.find_matching_binding(Vehicle, Person) is unconstrained
        assert self.kernel.find_matching_binding(Vehicle) is unconstrained

    def test_explicit_binding_wins_over_existing_default_binding(self):
        self.kernel.resolve(Car)
        default = self.kernel.find_matching_binding(Car)
        assert isinstance(default, DefaultBinding)

        explicit = self.kernel.bind(Car).to_self().binding

        assert self.kernel.find_matching_binding(Car) is explicit

    def test_returns_none_for_abstract_type_without_binding(self):
        assert self.kernel.find_matching_binding(Vehicle) is None
        assert self.kernel.bindings == ()
