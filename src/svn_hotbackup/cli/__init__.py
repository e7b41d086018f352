"""Command line interface for svn-hotbackup."""

from .dispatcher import main

__all__ = ["main"]
