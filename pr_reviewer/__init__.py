"""AI pull request reviewer: token-bounded batch review with layered response strategies."""

__version__ = "0.1.0"
