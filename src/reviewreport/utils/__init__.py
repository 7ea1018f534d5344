"""Miscellaneous utilities shared across modules."""

from .io import save_dataframe

__all__ = ["save_dataframe"]
