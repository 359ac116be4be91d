"""Robot control API package.

Exposes the installed distribution version as ``__version__``.
"""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("robot-control-api")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"
