"""NBA insights dashboard client package."""

__all__ = [
    "api",
    "cli",
    "config",
    "constants",
    "exceptions",
    "games",
    "interactive",
    "ops",
    "reporting",
]

__version__ = "0.1.0"
