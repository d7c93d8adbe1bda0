"""
Abstract head-set contract.

Callers can be written against `Heads` alone; `fileheads.FileHeads` is the
file-backed implementation.
"""

from .base import Heads

__all__ = ["Heads"]
