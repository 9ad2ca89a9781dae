"""
Plumber installer - setup, preflight and update tool for self-managed Plumber
"""

__version__ = "0.1.0"

from .errors import InstallerError
from .installer import Installer
from .updater import Updater

__all__ = ["Installer", "InstallerError", "Updater"]
