"""Discover web forms and replay them with supplied values."""

from importlib import metadata

try:
    __version__ = metadata.version("formreplay")
except metadata.PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

__all__ = ["__version__"]
