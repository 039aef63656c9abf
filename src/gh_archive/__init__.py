"""gh-archive

Interactive tool for archiving GitHub repositories, or mirroring them to
another git server and optionally deleting the GitHub original.
"""

__version__ = '0.1.0'

from .cli import main

__all__ = ['main']
