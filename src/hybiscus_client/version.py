"""Package version, also sent in the X-HYB-CLIENT header."""

__version__ = "0.3.0"
