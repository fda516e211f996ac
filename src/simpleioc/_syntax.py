from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Generic, TypeVar

from ._binding import Binding, Scope
from ._errors import ConfigurationError
from ._types import is_abstract, is_assignable, is_open_generic, is_protocol, type_name


if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T")


class BindingConfigurator(Generic[T]):
    """Fluent configuration for a binding returned by `Kernel.bind`.

    Example:
      kernel.bind(Vehicle).to_type(Car)
      kernel.bind(Vehicle).to_type(Motorcycle).in_transient_scope().when_injected_into(CoolPerson)
      kernel.bind(Database).to_factory(lambda: Database("sqlite://")).in_singleton_scope()

    """

    def __init__(self, binding: Binding) -> None:
        self._binding = binding

    @property
    def binding(self) -> Binding:
        return self._binding

    def to_type(self, target: type[T]) -> BindingConfigurator[T]:
        """Resolve the bound type by constructing `target`."""
        if not inspect.isclass(target):
            msg = f"Resolving type {target!r} must be a class."
            raise ConfigurationError(msg)
        if is_abstract(target):
            msg = f"Resolving type {type_name(target)} must not be abstract."
            raise ConfigurationError(msg)
        if is_open_generic(target):
            msg = f"Resolving type {type_name(target)} must not be generic."
            raise ConfigurationError(msg)

        bound = self._binding.bound_type
        # protocols are structural; only nominal classes can be checked here
        if inspect.isclass(bound) and not is_protocol(bound) and not is_assignable(target, bound):
            msg = f"Resolving type {type_name(target)} must be a subclass of {type_name(bound)}."
            raise ConfigurationError(msg)

        self._binding.target_type = target
        self._binding.factory = None
        return self

    def to_self(self) -> BindingConfigurator[T]:
        return self.to_type(self._binding.bound_type)

    def to_factory(self, factory: Callable[[], T], result_type: type[T] | None = None) -> BindingConfigurator[T]:
        """Resolve the bound type by calling `factory()`; it supersedes constructor selection."""
        if not callable(factory):
            msg = f"factory must be callable, got {type(factory).__name__}"
            raise ConfigurationError(msg)
        if result_type is not None:
            self.to_type(result_type)

        self._binding.factory = factory
        return self

    def in_scope(self, scope: Scope | str) -> BindingConfigurator[T]:
        try:
            self._binding.scope = Scope(scope)
        except ValueError as e:
            msg = f"Unknown scope {scope!r}."
            raise ConfigurationError(msg) from e
        return self

    def in_transient_scope(self) -> BindingConfigurator[T]:
        return self.in_scope(Scope.TRANSIENT)

    def in_singleton_scope(self) -> BindingConfigurator[T]:
        return self.in_scope(Scope.SINGLETON)

    def when_injected_into(self, target: type) -> BindingConfigurator[T]:
        """Only use this binding for dependencies of `target` or its subclasses."""
        if not inspect.isclass(target):
            msg = f"Type injected into must be a class, got {target!r}."
            raise ConfigurationError(msg)
        self._binding.injected_into = target
        self._binding.only_exactly_into = False
        return self

    def when_injected_exactly_into(self, target: type) -> BindingConfigurator[T]:
        """Only use this binding for dependencies of `target` itself."""
        if not inspect.isclass(target) or is_abstract(target):
            msg = f"Type injected into must not be abstract or a protocol, got {type_name(target)}."
            raise ConfigurationError(msg)
        self._binding.injected_into = target
        self._binding.only_exactly_into = True
        return self

    def __repr__(self) -> str:
        return f"BindingConfigurator({self._binding!r})"
