"""
Command-line interface for the localexec package.
"""

from .main import main_cli

__all__ = ["main_cli"]
