"""Minimal inversion-of-control kernel.

This package provides a small dependency injection kernel for Python: a
registry of type bindings plus greedy constructor resolution that recursively
builds whatever a requested class needs.

Exports:
- `Kernel`: registry and resolution entry point (`bind`, `resolve`, `dispose`).
- `BindingConfigurator`: fluent configuration returned by `Kernel.bind`.
- `Scope`: instance lifetime (transient or singleton).
- `constructor`: marks a classmethod as an alternative constructor.
- `inject`: copies values into an already resolved instance.
- `ResolveError`, `ConfigurationError`, `ObjectDisposedError`: error types.
"""

from ._binding import Binding, DefaultBinding, Scope
from ._constructor import constructor
from ._errors import ConfigurationError, IocError, ObjectDisposedError, ResolveError
from ._inject import inject
from ._kernel import Kernel
from ._syntax import BindingConfigurator


__all__ = [
    "Binding",
    "BindingConfigurator",
    "ConfigurationError",
    "DefaultBinding",
    "IocError",
    "Kernel",
    "ObjectDisposedError",
    "ResolveError",
    "Scope",
    "constructor",
    "inject",
]
