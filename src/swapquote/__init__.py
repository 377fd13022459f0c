"""swapquote - portion lookup and quote entities for swap routing."""

__version__ = "0.1.0"
