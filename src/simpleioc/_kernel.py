from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, TypeVar, overload

from ._binding import Binding, DefaultBinding
from ._errors import ConfigurationError, ObjectDisposedError, ResolveError
from ._syntax import BindingConfigurator
from ._types import type_name


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from types import TracebackType

T = TypeVar("T")


class Kernel:
    """Registry of bindings and entry point for resolution.

    - `bind` declares bindings; declare them all before resolving from several threads
    - `resolve` builds instances, synthesizing default bindings for unbound concrete classes
    - `dispose` tears down every binding and the instances they produced.
    """

    def __init__(self, *, detect_cycles: bool = True) -> None:
        self._bindings: list[Binding] = []
        self._lock = threading.RLock()
        self._local = threading.local()
        self._detect_cycles = detect_cycles
        self._disposing = False

    @property
    def bindings(self) -> tuple[Binding, ...]:
        with self._lock:
            return tuple(self._bindings)

    @property
    def is_disposed(self) -> bool:
        return self._disposing

    def bind(self, bound_type: type[T]) -> BindingConfigurator[T]:
        """Register a new binding for `bound_type` and return its configurator.

        Example:
          kernel.bind(Vehicle).to_type(Car).in_singleton_scope()

        """
        self._ensure_not_disposed()
        binding = Binding.create(self, bound_type)
        with self._lock:
            self._bindings.append(binding)
        logger.debug("Registered binding for %s", type_name(bound_type))
        return BindingConfigurator(binding)

    @overload
    def resolve(self, type_to_resolve: type[T], *explicit_params: object, **overrides: Any) -> T: ...

    @overload
    def resolve(self, type_to_resolve: Any, *explicit_params: object, **overrides: Any) -> object: ...

    def resolve(self, type_to_resolve: Any, *explicit_params: object, **overrides: Any) -> object:
        """Resolve `type_to_resolve` to an instance.

        `explicit_params` are matched to constructor parameters by type, each
        value used at most once; `overrides` are matched by parameter name.
        """
        self._ensure_not_disposed()
        binding = self.find_matching_binding(type_to_resolve, None)
        if binding is None:
            msg = f"No matching binding found for {type_name(type_to_resolve)}."
            raise ResolveError(msg)
        return self._activate(binding, explicit_params, overrides)

    def resolve_dependency(self, type_to_resolve: Any, injection_target: type) -> object:
        """Resolve a constructor dependency of `injection_target`."""
        binding = self.find_matching_binding(type_to_resolve, injection_target)
        if binding is None:
            msg = (
                f"No matching binding found for {type_name(type_to_resolve)} "
                f"injected into {type_name(injection_target)}."
            )
            raise ResolveError(msg)
        return self._activate(binding, (), None)

    def find_matching_binding(self, type_to_resolve: Any, injection_target: Any = None) -> Binding | None:
        """Find the binding that should resolve `type_to_resolve` for `injection_target`.

        Precedence, first registered wins within each tier:
        1. binding constrained exactly into the injection target
        2. binding constrained into the injection target or one of its bases
        3. unconstrained binding
        4. default binding created earlier
        5. new default binding, when `type_to_resolve` is a concrete class.
        """
        with self._lock:
            matching = [b for b in self._bindings if b.can_resolve(type_to_resolve, injection_target)]
            explicit = [b for b in matching if not b.is_default]

            for tier in (
                [b for b in explicit if b.is_constrained and b.only_exactly_into],
                [b for b in explicit if b.is_constrained and not b.only_exactly_into],
                [b for b in explicit if not b.is_constrained],
                matching,
            ):
                if tier:
                    return tier[0]

            try:
                default = DefaultBinding.create(self, type_to_resolve)
            except ConfigurationError as e:
                logger.debug("No default binding for %s: %s", type_name(type_to_resolve), e)
                return None

            self._bindings.append(default)
            logger.debug("Created default binding for %s", type_name(type_to_resolve))
            return default

    def dispose(self) -> None:
        """Dispose every binding, which in turn disposes the instances it resolved.

        Safe to call more than once, and from an instance that is itself being disposed.
        A binding that fails to dispose does not stop the others; the first
        failure is re-raised once all of them have been disposed.
        """
        if self._disposing:
            return
        self._disposing = True

        with self._lock:
            bindings = list(self._bindings)
        errors: list[Exception] = []
        for binding in bindings:
            try:
                binding.dispose()
            except Exception as e:  # noqa: BLE001
                errors.append(e)
            with self._lock:
                self._bindings.remove(binding)
        logger.debug("Kernel disposed %d binding(s)", len(bindings))

        if errors:
            raise errors[0]

    close = dispose

    def __enter__(self) -> Kernel:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.dispose()

    def _activate(
        self,
        binding: Binding,
        explicit_params: Sequence[object],
        overrides: Mapping[str, Any] | None,
    ) -> object:
        if not self._detect_cycles:
            return binding.resolve(explicit_params, overrides)

        stack = self._resolution_stack()
        if any(b is binding for b in stack):
            chain = [b.bound_type for b in stack] + [binding.bound_type]
            msg = "Circular dependency detected"
            raise ResolveError(msg, chain=chain)

        stack.append(binding)
        try:
            return binding.resolve(explicit_params, overrides)
        finally:
            stack.pop()

    def _resolution_stack(self) -> list[Binding]:
        stack = getattr(self._local, "stack", None)
        if stack is None:
            stack = self._local.stack = []
        return stack

    def _ensure_not_disposed(self) -> None:
        if self._disposing:
            msg = "Kernel has been disposed."
            raise ObjectDisposedError(msg)
