"""Command modules for cavectl CLI."""

from .install import install
from .auth import login, logout, keys_group
from .locations import locations_group
from .caves import caves_group
from .downloads import downloads_group
from .config import config_group

__all__ = [
    # Install
    "install",
    # Auth commands
    "login",
    "logout",
    "keys_group",
    # Registry commands
    "locations_group",
    "caves_group",
    "downloads_group",
    # Config commands
    "config_group",
]
