"""Index cooklang recipe folders, find recipe images and render recipes as cooklang or Markdown."""

__version__ = "0.1.0"

__all__ = ["cooklang_format", "images", "index", "markdown", "model", "walker"]