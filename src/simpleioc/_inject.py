from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping
from typing import Any, TypeVar, get_type_hints

from ._types import is_instance_of


logger = logging.getLogger(__name__)

T = TypeVar("T")


def inject(instance: T, values: Mapping[str, Any] | object | None) -> T:
    """Copy same-named values into the writable members of an already built instance.

    `values` is a mapping or any object whose attributes are read with `vars()`.
    A value is only assigned when `instance` already has a member of that name,
    the member is writable, and the value fits the member's annotation.

    Example:
      person = inject(kernel.resolve(NamedPerson, "Alice"), {"age": 40})

    Returns `instance`, so calls can be chained.
    """
    if instance is None:
        msg = "instance must not be None"
        raise ValueError(msg)

    if values is None:
        return instance

    source = values if isinstance(values, Mapping) else vars(values)
    hints = _member_hints(type(instance))

    for name, value in source.items():
        if name.startswith("_"):
            continue

        attr = inspect.getattr_static(type(instance), name, None)
        if inspect.isroutine(attr) or isinstance(attr, (classmethod, staticmethod)):
            continue
        if isinstance(attr, property):
            if attr.fset is None:
                logger.debug("Skipping read-only property %s.%s", type(instance).__name__, name)
                continue
            annotation = _property_hint(attr)
        elif name in hints or attr is not None or name in getattr(instance, "__dict__", {}):
            annotation = hints.get(name, inspect.Parameter.empty)
        else:
            continue

        if annotation is not inspect.Parameter.empty and not is_instance_of(value, annotation):
            logger.debug("Skipping %s.%s: %r does not match its annotation", type(instance).__name__, name, value)
            continue

        setattr(instance, name, value)

    return instance


def _member_hints(cls: type) -> dict[str, Any]:
    try:
        return get_type_hints(cls)
    except (NameError, TypeError):
        return {}


def _property_hint(prop: property) -> Any:
    try:
        hints = get_type_hints(prop.fget)
    except (NameError, TypeError):
        return inspect.Parameter.empty
    return hints.get("return", inspect.Parameter.empty)
