__version__ = "0.1.0"

__all__ = [
    "__version__",
    "bundle",
    "checks",
    "cli",
    "commands",
    "config",
    "contracts",
    "core",
    "extract",
    "model",
    "parse",
    "render",
    "toc",
]
