"""Decision core of a declarative HTTP resource reconciler."""

__version__ = "0.1.0"
