"""Named-slot markup templates backed by Jinja2.

A :class:`Template` is HTML source with ``{$name}`` slots and optional
named sub-regions. Slots are filled with :meth:`Template.set` (value is
escaped on render) or :meth:`Template.set_html` (value is trusted
markup). The source is compiled to a Jinja2 template once; filling and
rendering afterwards only binds values.

Example:
    >>> t = Template('<td class="{$cls}">{$name}</td>')
    >>> t.set("name", "<b>").set_html("cls", "right aligned").render()
    '<td class="right aligned">&lt;b&gt;</td>'
"""

from __future__ import annotations

import json
import re
from typing import Any, Mapping

from jinja2 import Environment
from markupsafe import Markup, escape

from tablekit.errors import RenderError

SLOT_PATTERN = re.compile(r"\{\$([^{}$]+)\}")

_JINJA_DELIMITERS = ("{{", "{%", "{#", "}}", "%}", "#}")

_environment: Environment | None = None


def _finalize(value: Any) -> Any:
    return "" if value is None else value


def get_environment() -> Environment:
    """Get the shared Jinja2 environment used to compile templates."""
    global _environment
    if _environment is None:
        _environment = Environment(autoescape=True, finalize=_finalize)
    return _environment


def slot(name: str) -> str:
    """Return the slot tag for ``name``."""
    return "{$" + name + "}"


def to_jinja_source(source: str) -> str:
    """Translate ``{$name}`` slot syntax into Jinja2 source.

    Literal text that happens to contain Jinja2 delimiters is wrapped in
    a raw block so it renders verbatim.
    """
    parts: list[str] = []
    pos = 0
    for match in SLOT_PATTERN.finditer(source):
        parts.append(_literal(source[pos:match.start()]))
        parts.append("{{ slots[%s] }}" % json.dumps(match.group(1)))
        pos = match.end()
    parts.append(_literal(source[pos:]))
    return "".join(parts)


def _literal(text: str) -> str:
    if any(d in text for d in _JINJA_DELIMITERS):
        return "{% raw %}" + text + "{% endraw %}"
    return text


class Template:
    """Markup with named slots and named regions.

    Attributes are never shared between clones: each clone carries its
    own slot values but reuses the compiled Jinja2 template.
    """

    def __init__(
        self,
        source: str,
        regions: Mapping[str, str] | None = None,
        env: Environment | None = None,
    ) -> None:
        """Initialize the template.

        Args:
            source: Markup with ``{$name}`` slots.
            regions: Named sub-templates that can be cloned out with
                :meth:`clone_region`.
            env: Jinja2 environment. Defaults to the shared one.
        """
        self._source = source
        self._regions = dict(regions or {})
        self._env = env or get_environment()
        self._compiled: Any = None
        self._slots: dict[str, Any] = {}

    @property
    def source(self) -> str:
        """Get the template source."""
        return self._source

    @property
    def env(self) -> Environment:
        """Get the Jinja2 environment this template compiles with."""
        return self._env

    @property
    def regions(self) -> list[str]:
        """Get the names of the regions this template carries."""
        return list(self._regions)

    @property
    def slot_names(self) -> list[str]:
        """Get the names of all slots in the source, in order of appearance."""
        return list(dict.fromkeys(SLOT_PATTERN.findall(self._source)))

    def has(self, name: str) -> bool:
        """Check whether the source contains a slot."""
        return slot(name) in self._source

    def get(self, name: str, default: Any = None) -> Any:
        """Get the value currently bound to a slot."""
        return self._slots.get(name, default)

    def set(self, name: str | Mapping[str, Any], value: Any = None) -> "Template":
        """Bind a value to a slot. The value is escaped on render.

        Args:
            name: Slot name, or a mapping of slot names to values.
            value: Value to bind.

        Returns:
            This template, for chaining.
        """
        if isinstance(name, Mapping):
            self._slots.update(name)
        else:
            self._slots[name] = value
        return self

    def set_html(self, name: str | Mapping[str, Any], html: Any = None) -> "Template":
        """Bind trusted markup to a slot. The markup is not escaped."""
        if isinstance(name, Mapping):
            for key, value in name.items():
                self._slots[key] = Markup("" if value is None else value)
        else:
            self._slots[name] = Markup("" if html is None else html)
        return self

    def append_html(self, name: str, html: Any) -> "Template":
        """Append trusted markup to whatever a slot already holds."""
        current = self._slots.get(name)
        if current is None:
            self._slots[name] = Markup(html)
        else:
            self._slots[name] = escape(current) + Markup(html)
        return self

    def delete(self, *names: str) -> "Template":
        """Clear the given slots."""
        for name in names:
            self._slots.pop(name, None)
        return self

    def clear(self) -> "Template":
        """Clear all slots."""
        self._slots.clear()
        return self

    def clone(self) -> "Template":
        """Copy this template, including bound values."""
        other = Template(self._source, self._regions, self._env)
        other._compiled = self._compiled
        other._slots = dict(self._slots)
        return other

    def clone_region(self, name: str) -> "Template":
        """Create a new template from a named region.

        Raises:
            RenderError: If the region does not exist.
        """
        if name not in self._regions:
            raise RenderError(
                f"Template has no region '{name}'. Available: {self.regions}"
            )
        return Template(self._regions[name], env=self._env)

    def compile(self) -> Any:
        """Compile the source into a Jinja2 template (once)."""
        if self._compiled is None:
            self._compiled = self._env.from_string(to_jinja_source(self._source))
        return self._compiled

    def render(self) -> str:
        """Render the template with the currently bound values."""
        return self.compile().render(slots=self._slots)

    def __getitem__(self, name: str) -> Any:
        return self._slots[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self.set(name, value)

    def __repr__(self) -> str:
        return f"Template(slots={self.slot_names!r}, regions={self.regions!r})"
