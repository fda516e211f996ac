from __future__ import annotations

import inspect
import logging
import weakref
from enum import Enum
from typing import TYPE_CHECKING, Any

from ._constructor import Constructor
from ._errors import ConfigurationError, ObjectDisposedError, ResolveError
from ._types import is_abstract, is_assignable, is_builtin, is_open_generic, is_protocol, type_name


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from ._kernel import Kernel


class Scope(Enum):
    TRANSIENT = "transient"
    SINGLETON = "singleton"


class Binding:
    """Resolution strategy and lifetime policy for one bound type.

    - `target_type` is instantiated through greedy constructor selection unless
      a `factory` is configured.
    - singleton instances are owned by the binding, transient ones are only
      observed through weak references so teardown can reach those still alive.
    - `injected_into` restricts the binding to dependencies of that type (or of
      its subclasses unless `only_exactly_into` is set).
    """

    is_default = False

    def __init__(self, kernel: Kernel, bound_type: Any) -> None:
        self._kernel = kernel
        self._bound_type = bound_type
        self.target_type: Any = bound_type
        self.factory: Callable[[], object] | None = None
        self.scope = Scope.TRANSIENT
        self.injected_into: type | None = None
        self.only_exactly_into = False

        self._singleton: object | None = None
        self._has_singleton = False
        self._transients: list[weakref.ref[Any]] = []
        self._disposing = False

    @classmethod
    def create(cls, kernel: Kernel, bound_type: Any) -> Binding:
        if is_open_generic(bound_type):
            msg = f"Bound type {type_name(bound_type)} must not be an open generic."
            raise ConfigurationError(msg)
        return cls(kernel, bound_type)

    @property
    def bound_type(self) -> Any:
        return self._bound_type

    @property
    def is_constrained(self) -> bool:
        return self.injected_into is not None

    @property
    def instances(self) -> list[object]:
        """Instances produced by this binding that are still alive."""
        self._purge()
        live = [ref() for ref in self._transients]
        if self._has_singleton:
            live.insert(0, self._singleton)
        return [obj for obj in live if obj is not None]

    def can_resolve(self, type_to_resolve: Any, injection_target: Any = None) -> bool:
        if self.injected_into is not None:
            if injection_target is None:
                return False
            if self.only_exactly_into:
                if injection_target is not self.injected_into:
                    return False
            elif not is_assignable(injection_target, self.injected_into):
                return False

        return self._bound_type == type_to_resolve

    def resolve(self, explicit_params: Sequence[object] = (), overrides: Mapping[str, Any] | None = None) -> object:
        if self._disposing:
            msg = f"Binding for {type_name(self._bound_type)} has been disposed."
            raise ObjectDisposedError(msg)

        if self.scope is Scope.SINGLETON and self._has_singleton:
            return self._singleton

        if self.factory is not None:
            instance = self.factory()
            self._check_factory_result(instance)
        else:
            instance = Constructor(self._kernel).construct(self.target_type, explicit_params, overrides)

        self._track(instance)
        return instance

    def dispose(self) -> None:
        if self._disposing:
            return
        self._disposing = True

        instances = self.instances
        self._singleton = None
        self._has_singleton = False
        self._transients.clear()

        logger.debug("Disposing %d instance(s) of %s", len(instances), type_name(self._bound_type))
        errors: list[Exception] = []
        for instance in instances:
            try:
                _dispose_instance(instance)
            except Exception as e:  # noqa: BLE001
                logger.warning("Failed to dispose %s", type(instance).__name__, exc_info=True)
                errors.append(e)

        # the rest were still disposed; report the first failure
        if errors:
            raise errors[0]

    def _check_factory_result(self, instance: object) -> None:
        bound = self._bound_type
        if not inspect.isclass(bound) or is_protocol(bound):
            return
        if not isinstance(instance, bound):
            msg = f"Factory for {type_name(bound)} returned an instance of {type(instance).__name__}."
            raise ResolveError(msg)

    def _track(self, instance: object) -> None:
        if self.scope is Scope.SINGLETON:
            self._singleton = instance
            self._has_singleton = True
            return

        self._purge()
        try:
            self._transients.append(weakref.ref(instance))
        except TypeError:
            logger.debug("%s instances cannot be weakly referenced; not tracked", type(instance).__name__)

    def _purge(self) -> None:
        self._transients = [ref for ref in self._transients if ref() is not None]

    def __repr__(self) -> str:
        parts = [type_name(self._bound_type)]
        if self.target_type is not self._bound_type:
            parts.append(f"to={type_name(self.target_type)}")
        parts.append(self.scope.value)
        if self.injected_into is not None:
            kind = "exactly_into" if self.only_exactly_into else "into"
            parts.append(f"{kind}={type_name(self.injected_into)}")
        return f"{type(self).__name__}({', '.join(parts)})"


class DefaultBinding(Binding):
    """Implicit binding for an unbound concrete class: transient, unconstrained, no factory."""

    is_default = True

    @classmethod
    def create(cls, kernel: Kernel, bound_type: Any) -> DefaultBinding:
        if not inspect.isclass(bound_type):
            msg = f"{type_name(bound_type)} is not a class."
            raise ConfigurationError(msg)
        if is_abstract(bound_type):
            msg = f"{type_name(bound_type)} is abstract or a protocol."
            raise ConfigurationError(msg)
        if is_open_generic(bound_type):
            msg = f"{type_name(bound_type)} must not be an open generic."
            raise ConfigurationError(msg)
        if is_builtin(bound_type):
            msg = f"Builtin type {type_name(bound_type)} is never bound implicitly."
            raise ConfigurationError(msg)
        return cls(kernel, bound_type)

    def can_resolve(self, type_to_resolve: Any, injection_target: Any = None) -> bool:
        return self._bound_type == type_to_resolve


def _dispose_instance(instance: object) -> None:
    """Call the instance's ``dispose()`` or ``close()``, ignoring already disposed objects."""
    release = getattr(instance, "dispose", None)
    if not callable(release):
        release = getattr(instance, "close", None)
    if not callable(release):
        return

    try:
        release()
    except ObjectDisposedError:
        logger.debug("%s was already disposed", type(instance).__name__)
