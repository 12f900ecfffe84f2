"""Factory functions for creating column decorators.

This module provides a registry-based factory for decorator kinds and
resolves decorator "seeds" into decorator instances. A seed is any of:

- ``None``: pick a decorator from the field (``ui["table"]``, then its type)
- a registered kind name: ``"money"``
- a ``(kind, options)`` pair: ``("status", {"positive": ["paid"]})``
- a mapping of options, optionally with a ``"kind"`` key
- a decorator class
- a decorator instance

New decorator kinds can be registered at runtime.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Mapping

from tablekit.columns.base import REQUIRED_METHODS, Generic
from tablekit.columns.decorators import Checkbox, Link, Money, Password, Status, Template, Text
from tablekit.errors import InvalidDecoratorError
from tablekit.sources._protocols import ColumnType

if TYPE_CHECKING:
    from tablekit.sources.base import Field

logger = logging.getLogger(__name__)

# Registry of decorator classes by kind name
_decorator_registry: dict[str, type] = {
    cls.kind: cls for cls in (Generic, Password, Text, Money, Status, Link, Template, Checkbox)
}

# Default decorator seed per declared field type
TYPE_TO_DECORATOR: dict[ColumnType, Any] = {
    ColumnType.PASSWORD: "password",
    ColumnType.TEXT: "text",
    ColumnType.MONEY: "money",
    ColumnType.BOOLEAN: ("status", {"positive": [True], "negative": [False]}),
}


def register_decorator(name: str) -> Callable[[type], type]:
    """Decorator to register a column decorator kind.

    Args:
        name: Kind name to register the class under.

    Returns:
        Decorator function.

    Example:
        >>> @register_decorator("percent")
        ... class Percent(Generic):
        ...     kind = "percent"
    """

    def decorator(cls: type) -> type:
        missing = [m for m in REQUIRED_METHODS if not callable(getattr(cls, m, None))]
        if missing:
            raise InvalidDecoratorError(cls, f"missing {', '.join(missing)}")
        _decorator_registry[name] = cls
        logger.debug(f"Registered column decorator '{name}': {cls.__name__}")
        return cls

    return decorator


def list_decorators() -> list[str]:
    """List all registered decorator kind names."""
    return sorted(_decorator_registry)


def validate_decorator(obj: Any) -> Any:
    """Check that an object satisfies the decorator contract.

    Returns:
        The object itself.

    Raises:
        InvalidDecoratorError: If a required method is missing.
    """
    if isinstance(obj, type):
        raise InvalidDecoratorError(obj, "expected an instance, got a class")
    missing = [m for m in REQUIRED_METHODS if not callable(getattr(obj, m, None))]
    if missing:
        raise InvalidDecoratorError(obj, f"missing {', '.join(missing)}")
    return obj


def _lookup(name: str) -> type:
    key = name.lower().strip()
    if key not in _decorator_registry:
        raise InvalidDecoratorError(
            name,
            f"unknown decorator kind; available: {', '.join(list_decorators())}",
        )
    return _decorator_registry[key]


def _split_seed(seed: Any) -> tuple[type | None, dict[str, Any]]:
    """Split a seed into (decorator class or None, options)."""
    if isinstance(seed, str):
        return _lookup(seed), {}
    if isinstance(seed, type):
        missing = [m for m in REQUIRED_METHODS if not callable(getattr(seed, m, None))]
        if missing:
            raise InvalidDecoratorError(seed, f"missing {', '.join(missing)}")
        return seed, {}
    if isinstance(seed, (tuple, list)) and seed:
        cls, _ = _split_seed(seed[0])
        options = dict(seed[1]) if len(seed) > 1 else {}
        return cls, options
    if isinstance(seed, Mapping):
        options = dict(seed)
        kind = options.pop("kind", None)
        return (_split_seed(kind)[0] if kind is not None else None), options
    raise InvalidDecoratorError(seed, "unsupported decorator seed")


def _is_instance(seed: Any) -> bool:
    return seed is not None and not isinstance(seed, (str, type, tuple, list, Mapping))


def create_decorator(seed: Any = None, **options: Any) -> Any:
    """Create a decorator from a seed without any field context.

    Args:
        seed: Decorator seed. Defaults to ``"generic"``.
        **options: Constructor options, overriding those in the seed.

    Returns:
        Decorator instance.

    Raises:
        InvalidDecoratorError: If the seed cannot be resolved.
    """
    if _is_instance(seed):
        return validate_decorator(seed)
    cls, seed_options = _split_seed(seed if seed is not None else "generic")
    cls = cls or Generic
    return _instantiate(cls, {**seed_options, **options})


def _instantiate(cls: type, options: dict[str, Any]) -> Any:
    try:
        decorator = cls(**options)
    except TypeError as e:
        raise InvalidDecoratorError(cls, str(e)) from e
    return validate_decorator(decorator)


def resolve_decorator(field: "Field | None", seed: Any = None) -> Any:
    """Resolve the decorator for a column.

    Seeds are consulted in order: the explicit seed, ``field.ui["table"]``,
    the field type's default, then ``"generic"``. The first seed naming a
    class picks the class; options are merged from every seed that names
    no class or the same class, earlier seeds taking precedence.

    Args:
        field: The column's field, or None for positional columns.
        seed: Explicit decorator seed.

    Returns:
        Decorator instance.

    Raises:
        InvalidDecoratorError: If a seed is invalid or the result does not
            satisfy the decorator contract.
    """
    seeds = [seed]
    if field is not None:
        seeds.append(field.ui.get("table"))
        seeds.append(TYPE_TO_DECORATOR.get(field.type))
    seeds.append("generic")

    split: list[tuple[type | None, dict[str, Any]]] = []
    for s in seeds:
        if s is None:
            continue
        if _is_instance(s):
            if not split or all(c is None for c, _ in split):
                return validate_decorator(s)
            continue
        split.append(_split_seed(s))

    cls = next(c for c, _ in split if c is not None)

    options: dict[str, Any] = {}
    for seed_cls, seed_options in split:
        if seed_cls is None or seed_cls is cls:
            for key, value in seed_options.items():
                options.setdefault(key, value)

    decorator = _instantiate(cls, options)
    logger.debug(
        f"Resolved decorator {cls.__name__} for "
        f"{'field ' + repr(field.name) if field is not None else 'positional column'}"
    )
    return decorator
