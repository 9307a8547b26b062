"""Command line front end to update firmware in QMI devices."""

__version__ = "0.1.0"

__all__ = ["__version__"]
