"""Shell package for tradfri-console.

This package contains the interactive full-screen console and its components.
"""

from .core import LightShell, run_shell, SHELL_VERSION

__all__ = ['LightShell', 'run_shell', 'SHELL_VERSION']
