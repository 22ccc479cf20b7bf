"""jdg — narzędzie CLI silnika osądów."""

__version__ = "0.1.0"
