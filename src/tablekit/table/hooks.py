"""Per-row extension points of the table renderer.

Available Hooks:
    - before_row: Called with the row context before a row is rendered.
      Returning ``False`` or ``RowAction.SKIP`` drops the row.
    - row_markup: Called with the row context when per-row markup is on.
      Returns a mapping of slot name to trusted markup for that row.

Example:
    >>> hooks = HookManager()
    >>> hook = hooks.register(HookType.BEFORE_ROW, lambda row: row["amount"] > 0)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Mapping

if TYPE_CHECKING:
    from tablekit.sources.base import RowContext

logger = logging.getLogger(__name__)


class HookType(str, Enum):
    """Types of hooks available to a table."""

    BEFORE_ROW = "before_row"
    ROW_MARKUP = "row_markup"


class RowAction(str, Enum):
    """Result a ``before_row`` handler may return."""

    CONTINUE = "continue"
    SKIP = "skip"


@dataclass
class Hook:
    """Represents a registered hook handler.

    Attributes:
        hook_type: Type of hook.
        handler: The callback function.
        priority: Execution order (lower = earlier).
        source: Identifier of whoever registered the hook.
        enabled: Whether hook is currently enabled.
    """

    hook_type: HookType | str
    handler: Callable[..., Any]
    priority: int = 100
    source: str = "unknown"
    enabled: bool = True


def _key(hook_type: HookType | str) -> str:
    return hook_type.value if isinstance(hook_type, HookType) else hook_type


class HookManager:
    """Manages hook registration and execution.

    Handlers run in priority order. Unlike notification hooks, row hooks
    decide what gets rendered, so a failing handler aborts the render:
    the error is logged and re-raised.
    """

    def __init__(self) -> None:
        self._hooks: dict[str, list[Hook]] = defaultdict(list)

    def register(
        self,
        hook_type: HookType | str,
        handler: Callable[..., Any],
        priority: int = 100,
        source: str = "unknown",
    ) -> Hook:
        """Register a hook handler.

        Args:
            hook_type: Type of hook to register for.
            handler: Callback function.
            priority: Execution order (lower = earlier).
            source: Identifier for the registering code.

        Returns:
            The created Hook instance.
        """
        hook_key = _key(hook_type)
        hook = Hook(hook_type=hook_type, handler=handler, priority=priority, source=source)

        self._hooks[hook_key].append(hook)
        # stable sort keeps registration order within a priority
        self._hooks[hook_key].sort(key=lambda h: h.priority)

        logger.debug(f"Registered hook: {hook_key} from {source} (priority={priority})")
        return hook

    def unregister(
        self,
        hook_type: HookType | str,
        handler: Callable[..., Any] | None = None,
        source: str | None = None,
    ) -> int:
        """Unregister hook handlers.

        Args:
            hook_type: Type of hook.
            handler: Specific handler to remove (if None, uses source).
            source: Remove all hooks from this source.

        Returns:
            Number of hooks removed.
        """
        hook_key = _key(hook_type)
        if hook_key not in self._hooks:
            return 0

        original_count = len(self._hooks[hook_key])
        if handler is not None:
            self._hooks[hook_key] = [h for h in self._hooks[hook_key] if h.handler != handler]
        elif source is not None:
            self._hooks[hook_key] = [h for h in self._hooks[hook_key] if h.source != source]

        removed = original_count - len(self._hooks[hook_key])
        logger.debug(f"Unregistered {removed} hook(s) from {hook_key}")
        return removed

    def trigger(self, hook_type: HookType | str, *args: Any, **kwargs: Any) -> list[Any]:
        """Trigger all enabled handlers for a hook type.

        Returns:
            List of results from all handlers, in execution order.
        """
        results: list[Any] = []
        for hook in self._hooks.get(_key(hook_type), []):
            if not hook.enabled:
                continue
            try:
                results.append(hook.handler(*args, **kwargs))
            except Exception as e:
                logger.error(
                    f"Error in hook handler {getattr(hook.handler, '__name__', hook.handler)!s} "
                    f"from {hook.source}: {e}"
                )
                raise
        return results

    def should_skip(self, ctx: "RowContext") -> bool:
        """Run ``before_row`` handlers; True if any of them asks to skip the row."""
        return any(
            result is False or result == RowAction.SKIP
            for result in self.trigger(HookType.BEFORE_ROW, ctx)
        )

    def collect_markup(self, ctx: "RowContext") -> dict[str, Any]:
        """Run ``row_markup`` handlers and merge their mappings, later winning."""
        merged: dict[str, Any] = {}
        for result in self.trigger(HookType.ROW_MARKUP, ctx):
            if result is None:
                continue
            if not isinstance(result, Mapping):
                raise TypeError(
                    f"row_markup handlers must return a mapping, got {type(result).__name__}"
                )
            merged.update(result)
        return merged

    def has(self, hook_type: HookType | str) -> bool:
        """Check whether any enabled handler is registered for a hook type."""
        return any(h.enabled for h in self._hooks.get(_key(hook_type), []))

    def get_hooks(self, hook_type: HookType | str | None = None) -> list[Hook]:
        """Get registered hooks, optionally filtered by type."""
        if hook_type is None:
            return [hook for hooks in self._hooks.values() for hook in hooks]
        return list(self._hooks.get(_key(hook_type), []))

    def clear(self, hook_type: HookType | str | None = None) -> None:
        """Clear registered hooks of one type, or all of them."""
        if hook_type is None:
            self._hooks.clear()
        else:
            self._hooks.pop(_key(hook_type), None)

    def enable(self, hook_type: HookType | str | None = None, source: str | None = None) -> int:
        """Enable hooks. Returns the number of hooks enabled."""
        return self._set_enabled(True, hook_type, source)

    def disable(self, hook_type: HookType | str | None = None, source: str | None = None) -> int:
        """Disable hooks. Returns the number of hooks disabled."""
        return self._set_enabled(False, hook_type, source)

    def _set_enabled(
        self,
        enabled: bool,
        hook_type: HookType | str | None,
        source: str | None,
    ) -> int:
        count = 0
        for hook in self.get_hooks(hook_type):
            if source is None or hook.source == source:
                hook.enabled = enabled
                count += 1
        return count

    def __len__(self) -> int:
        return sum(len(hooks) for hooks in self._hooks.values())

    def __repr__(self) -> str:
        return f"HookManager(hooks={len(self)})"
