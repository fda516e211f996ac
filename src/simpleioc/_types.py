"""Type introspection helpers.

Every "is this type usable here" question the kernel asks goes through this
module, so resolution itself only ever compares type identities and calls
`is_assignable` / `is_instance_of`.
"""

from __future__ import annotations

import inspect
import types
import typing
from typing import Any, Protocol, TypeVar, Union, cast, get_args, get_origin


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def is_protocol(tp: Any) -> bool:
        return inspect.isclass(tp) and typing.is_protocol(tp)

else:

    def is_protocol(tp: Any) -> bool:
        """Detect whether 'tp' is a typing.Protocol subclass (safe)."""
        return (
            inspect.isclass(tp)
            and issubclass(tp, cast("type", Protocol))
            and bool(getattr(tp, "_is_protocol", False))
        )


def is_open_generic(tp: Any) -> bool:
    """True for generic classes or aliases that still carry unbound type parameters."""
    if isinstance(tp, TypeVar):
        return True
    parameters = getattr(tp, "__parameters__", ())
    if not parameters:
        return False
    return inspect.isclass(tp) or get_origin(tp) is not None


def is_abstract(tp: Any) -> bool:
    """Abstract base classes and protocols cannot be instantiated."""
    return inspect.isclass(tp) and (inspect.isabstract(tp) or is_protocol(tp))


def is_builtin(tp: Any) -> bool:
    return getattr(tp, "__module__", "") == "builtins"


def is_assignable(sub: Any, sup: Any) -> bool:
    """Return whether values of type `sub` may be used where `sup` is expected."""
    if sub == sup:
        return True
    if not (inspect.isclass(sub) and inspect.isclass(sup)):
        return False
    try:
        return issubclass(sub, sup)
    except TypeError:
        # non runtime-checkable protocols refuse issubclass
        return sup in getattr(sub, "__mro__", ())


def is_instance_of(value: object, annotation: Any) -> bool:
    """Return whether `value` satisfies `annotation`; unanswerable checks say no."""
    if annotation is Any:
        return True

    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        return any(is_instance_of(value, arg) for arg in get_args(annotation))
    if inspect.isclass(origin):
        # list[str], Sequence[int]: only the container type can be checked
        annotation = origin

    try:
        return isinstance(value, annotation)
    except TypeError:
        return inspect.isclass(annotation) and annotation in type(value).__mro__


def type_name(tp: Any) -> str:
    return getattr(tp, "__qualname__", None) or getattr(tp, "__name__", None) or repr(tp)
