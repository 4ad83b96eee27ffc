"""struktogramm - flow graphs to structured (Nassi-Shneiderman) diagrams and back."""

from typing import TYPE_CHECKING

__all__ = ["Settings", "DiagramPipeline"]
__version__ = "0.1.0"

if TYPE_CHECKING:
    from .config.settings import Settings
    from .pipeline import DiagramPipeline


def __getattr__(name: str):
    if name == "Settings":
        from .config.settings import Settings

        return Settings
    if name == "DiagramPipeline":
        from .pipeline import DiagramPipeline

        return DiagramPipeline
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
