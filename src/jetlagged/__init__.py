"""Flight-delay prediction market resolver and contract client."""

__version__ = "0.1.0"
