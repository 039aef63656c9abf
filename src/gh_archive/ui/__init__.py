"""Console interaction helpers."""

from .prompts import Prompter

__all__ = ['Prompter']
