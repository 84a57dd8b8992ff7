"""Install folder naming for caves."""

import logging
import re
from urllib.parse import urlparse

from .cave import Cave, InstallLocation
from .errors import EnvironmentFailure
from .models import Game

logger = logging.getLogger(__name__)

# "Overland 200" is where we stop
UNIQUE_MAX_TRIES = 200

_SLUG_RE = re.compile(r"^/([^/]+)")


def folder_name_from_slug(game: Game) -> str:
    """Take the first path segment of the game's URL, or ""."""
    if not game.url:
        return ""

    try:
        path = urlparse(game.url).path
    except ValueError as e:
        logger.warning(f"Could not parse game URL ({game.url}): {e}")
        return ""

    match = _SLUG_RE.match(path)
    if match:
        return match.group(1)
    return ""


def folder_name_from_id(game: Game) -> str:
    return f"game-{game.id}"


def make_folder_name(game: Game) -> str:
    """Derive an install folder name from game metadata. Never empty."""
    return folder_name_from_slug(game) or folder_name_from_id(game)


def ensure_unique_folder_name(cave: Cave, location: InstallLocation) -> None:
    """Suffix the cave's folder name until it does not exist on disk.

    Tries "<base>", "<base> 2", "<base> 3", ... for UNIQUE_MAX_TRIES attempts.

    Raises:
        EnvironmentFailure: If every attempt collides. The cave keeps the
            unsuffixed base name.
    """
    base = cave.install_folder_name
    suffix = 2

    for _ in range(UNIQUE_MAX_TRIES):
        if not cave.install_folder(location).exists():
            return

        cave.install_folder_name = f"{base} {suffix}"
        suffix += 1

    cave.install_folder_name = base
    raise EnvironmentFailure(
        f"Could not ensure unique install folder starting with ({cave.install_folder(location)})"
    )
