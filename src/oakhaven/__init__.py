from importlib.metadata import version, PackageNotFoundError

from .generation.factory import LevelFactory, generate

__all__ = ["__version__", "LevelFactory", "generate"]

try:
    __version__ = version("oakhaven")
except PackageNotFoundError:  # pragma: no cover - during tests without packaging
    __version__ = "0.0.0"
