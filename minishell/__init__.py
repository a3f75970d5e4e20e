"""Core of a small shell: environment, PATH lookup, builtins, redirections and pipeline execution."""

__version__ = "0.1.0"
__all__ = ["__version__"]