"""Renderer base classes."""

from tablekit.rendering.base import BaseRenderer, RendererConfig

__all__ = ["BaseRenderer", "RendererConfig"]
