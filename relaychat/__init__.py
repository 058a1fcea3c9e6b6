"""A TCP chat relay server and a Tkinter chat client."""

__version__ = "0.1.0"
__all__ = ["__version__"]