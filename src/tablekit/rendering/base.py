"""Base class for renderers.

A renderer turns its input into a markup document. Subclasses implement
:meth:`BaseRenderer.render`; writing to files and the bytes variant are
shared.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import replace
from pathlib import Path
from typing import Any, Generic, Protocol, TypeVar

from tablekit.errors import ConfigError, WriteError


class RendererConfig(Protocol):
    """What the base renderer needs from a configuration object."""

    def get_output_path(self) -> Path | None:
        ...


ConfigT = TypeVar("ConfigT", bound=RendererConfig)


class BaseRenderer(ABC, Generic[ConfigT]):
    """Abstract base class for renderers.

    Example:
        >>> class Greeting(BaseRenderer[TableConfig]):
        ...     @classmethod
        ...     def _default_config(cls) -> TableConfig:
        ...         return TableConfig()
        ...     def render(self, data=None) -> str:
        ...         return "<p>hello</p>"
    """

    name: str = "base"
    file_extension: str = ".html"
    content_type: str = "text/html"

    def __init__(self, config: ConfigT | None = None, **kwargs: Any) -> None:
        """Initialize the renderer with optional configuration.

        Args:
            config: Renderer configuration (a dataclass). It is copied, so
                overrides never reach the caller's instance. If None, uses
                default configuration.
            **kwargs: Configuration options to override.

        Raises:
            ConfigError: If an override names an unknown option.
        """
        self._config = replace(config) if config is not None else self._default_config()

        for key, value in kwargs.items():
            if not hasattr(self._config, key):
                raise ConfigError(
                    f"Unknown option '{key}' for {type(self._config).__name__}"
                )
            setattr(self._config, key, value)

    @classmethod
    @abstractmethod
    def _default_config(cls) -> ConfigT:
        """Create default configuration for this renderer type."""
        pass

    @property
    def config(self) -> ConfigT:
        """Get the renderer configuration."""
        return self._config

    @abstractmethod
    def render(self, data: Any = None) -> str:
        """Render the input to a string.

        Raises:
            RenderError: If rendering fails.
        """
        pass

    def render_to_bytes(self, data: Any = None, encoding: str = "utf-8") -> bytes:
        """Render the input to bytes."""
        return self.render(data).encode(encoding)

    def write(self, data: Any = None, path: str | Path | None = None) -> Path:
        """Write the rendered document to a file.

        Args:
            data: The input to render.
            path: Optional path to write to. Uses config.output_path if not specified.

        Returns:
            The path where the document was written.

        Raises:
            WriteError: If no path is available or writing fails.
        """
        output_path = Path(path) if path else self._config.get_output_path()

        if output_path is None:
            raise WriteError(
                "No output path specified. Either pass a path argument "
                "or set output_path in the configuration."
            )

        self._write(self.render(data), output_path)
        return output_path

    def report(self, data: Any = None, path: str | Path | None = None) -> str:
        """Render the input, writing it to a file when a path is available.

        Returns:
            The rendered document.
        """
        content = self.render(data)

        output_path = Path(path) if path else self._config.get_output_path()
        if output_path:
            self._write(content, output_path)

        return content

    def _write(self, content: str, output_path: Path) -> None:
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise WriteError(f"Failed to write {self.name} to {output_path}: {e}") from e
