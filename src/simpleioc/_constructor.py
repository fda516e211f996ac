from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar, get_type_hints

from ._errors import ResolveError
from ._types import is_instance_of, type_name


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from ._kernel import Kernel

T = TypeVar("T")

_CONSTRUCTOR_MARKER = "__simpleioc_constructor__"
_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


def constructor(fn: Callable[..., T] | classmethod) -> classmethod:
    """Mark a classmethod as an alternative constructor.

    The kernel considers ``__init__`` and every marked classmethod when it
    builds an instance, trying the one with the most parameters first::

        class NamedPerson:
            def __init__(self, vehicle: Vehicle): ...

            @constructor
            def named(cls, name: str, vehicle: Vehicle) -> NamedPerson: ...
    """
    func = fn.__func__ if isinstance(fn, classmethod) else fn
    setattr(func, _CONSTRUCTOR_MARKER, True)
    return classmethod(func)


@dataclass(frozen=True)
class ConstructorCandidate:
    """One way of building an instance: a callable plus its injectable parameters."""

    name: str
    factory: Callable[..., object]
    parameters: tuple[inspect.Parameter, ...]
    hints: dict[str, Any] = field(default_factory=dict)
    accepts_extra_kwargs: bool = False

    @property
    def arity(self) -> int:
        return len(self.parameters)

    def annotation(self, param: inspect.Parameter) -> Any:
        if param.name in self.hints:
            return self.hints[param.name]
        # string annotations that get_type_hints could not evaluate are useless here
        if isinstance(param.annotation, str):
            return inspect.Parameter.empty
        return param.annotation

    def describe(self, cls: type) -> str:
        params = ", ".join(p.name for p in self.parameters)
        return f"{type_name(cls)}.{self.name}({params})"


def constructor_candidates(cls: type) -> list[ConstructorCandidate]:
    """Return the constructors of `cls`, most parameters first.

    The sort is stable: ``__init__`` wins a tie, then alternative constructors
    in the order they are defined along the MRO.
    """
    candidates = [_init_candidate(cls)]
    seen: set[str] = set()
    for klass in cls.__mro__:
        if klass is object:
            continue
        for name, attr in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            if isinstance(attr, classmethod) and getattr(attr.__func__, _CONSTRUCTOR_MARKER, False):
                candidates.append(_candidate(name, getattr(cls, name), attr.__func__))
    return sorted(candidates, key=lambda c: c.arity, reverse=True)


def _init_candidate(cls: type) -> ConstructorCandidate:
    try:
        sig = inspect.signature(cls)
    except (TypeError, ValueError):
        # some extension types expose no signature; assume a no-argument constructor
        return ConstructorCandidate(name="__init__", factory=cls, parameters=())

    return ConstructorCandidate(
        name="__init__",
        factory=cls,
        parameters=tuple(p for p in sig.parameters.values() if p.kind not in _VARIADIC),
        hints=_get_init_type_hints(cls),
        accepts_extra_kwargs=any(p.kind is p.VAR_KEYWORD for p in sig.parameters.values()),
    )


def _candidate(name: str, bound: Callable[..., object], func: Callable[..., object]) -> ConstructorCandidate:
    sig = inspect.signature(bound)
    return ConstructorCandidate(
        name=name,
        factory=bound,
        parameters=tuple(p for p in sig.parameters.values() if p.kind not in _VARIADIC),
        hints=_get_type_hints(func, func.__qualname__),
        accepts_extra_kwargs=any(p.kind is p.VAR_KEYWORD for p in sig.parameters.values()),
    )


class Constructor:
    """Greedy constructor selection against a kernel.

    Candidates are tried from the most to the fewest parameters. A candidate
    whose parameters cannot all be satisfied, or whose invocation raises, is
    skipped and the next one is tried.
    """

    def __init__(self, kernel: Kernel) -> None:
        self._kernel = kernel

    def construct(
        self,
        cls: type[T],
        explicit_params: Sequence[object] = (),
        overrides: Mapping[str, Any] | None = None,
    ) -> T:
        overrides = dict(overrides or {})
        overrides.pop("self", None)  # never allow passing 'self'
        explicit = [p for p in explicit_params if p is not None]
        attempts: list[str] = []

        for candidate in constructor_candidates(cls):
            try:
                args, kwargs = self._satisfy(cls, candidate, explicit, overrides)
            except ResolveError as e:
                reason = str(e).splitlines()[0]
                attempts.append(f"{candidate.describe(cls)}: {reason}")
                logger.debug("Skipping %s: %s", candidate.describe(cls), reason)
                continue

            try:
                return candidate.factory(*args, **kwargs)
            except Exception as e:  # noqa: BLE001
                attempts.append(f"{candidate.describe(cls)}: raised {type(e).__name__}: {e}")
                logger.debug("Constructor %s failed", candidate.describe(cls), exc_info=True)

        msg = f"No valid constructor for resolving {type_name(cls)} found."
        raise ResolveError(msg, attempts=attempts)

    def _satisfy(
        self,
        cls: type,
        candidate: ConstructorCandidate,
        explicit: list[object],
        overrides: dict[str, Any],
    ) -> tuple[list[Any], dict[str, Any]]:
        unused = list(explicit)
        args: list[Any] = []
        kwargs: dict[str, Any] = {}

        for p in candidate.parameters:
            value = self._resolve_param(cls, p, candidate.annotation(p), unused, overrides)
            if p.kind is p.POSITIONAL_ONLY:
                args.append(value)
            else:
                kwargs[p.name] = value

        if candidate.accepts_extra_kwargs:
            names = {p.name for p in candidate.parameters}
            kwargs.update({k: v for k, v in overrides.items() if k not in names})

        return args, kwargs

    def _resolve_param(
        self,
        cls: type,
        p: inspect.Parameter,
        annotation: Any,
        unused: list[object],
        overrides: dict[str, Any],
    ) -> Any:
        """Resolving param.

        Resolution precedence:
        1. override by name
        2. explicit value assignable to the annotation (consumed)
        3. kernel binding, injected into `cls`
        4. default
        5. error.
        """
        if p.name in overrides:
            return overrides[p.name]

        reason = "no annotation"
        if annotation is not inspect.Parameter.empty:
            for i, value in enumerate(unused):
                if is_instance_of(value, annotation):
                    return unused.pop(i)

            try:
                return self._kernel.resolve_dependency(annotation, cls)
            except ResolveError as e:
                reason = str(e).splitlines()[0]
                if p.default is not inspect.Parameter.empty:
                    logger.debug("Falling back to default for %s.%s: %s", type_name(cls), p.name, reason)

        if p.default is not inspect.Parameter.empty:
            return p.default

        msg = f"Cannot satisfy constructor parameter '{p.name}' for {type_name(cls)} ({reason})."
        raise ResolveError(msg)


def _get_init_type_hints(cls: type) -> dict[str, Any]:
    try:
        init = inspect.getattr_static(cls, "__init__")
    except AttributeError:
        return {}
    return _get_type_hints(init, cls.__qualname__)


def _get_type_hints(func: Any, qualname: str) -> dict[str, Any]:
    try:
        hints = get_type_hints(func)
    except TypeError:
        hints = {}
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s type hints", exc.name, qualname)
        annotations = getattr(func, "__annotations__", {})
        hints = {name: ann for name, ann in annotations.items() if not isinstance(ann, str)}

    hints.pop("return", None)
    return hints
