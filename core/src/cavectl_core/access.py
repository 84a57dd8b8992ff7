"""Per-game access credentials for catalog calls."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, TYPE_CHECKING
import logging

from .auth import AuthStore, load_api_key
from .errors import ValidationError

if TYPE_CHECKING:
    from .config import Config
    from .registry import Registry

logger = logging.getLogger(__name__)


@dataclass
class GameAccess:
    """API key plus the credentials needed to reach one game"""

    api_key: str
    credentials: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        # never write the API key to disk
        return {"credentials": dict(self.credentials)}


def access_for_game(registry: "Registry", config: "Config", game_id: int) -> GameAccess:
    """Look up the access needed to query a game.

    The API key comes from the config (or keyring / key file); a download
    key recorded for the game, if any, is added to the credentials.

    Raises:
        ValidationError: If no API key is configured
    """
    api_key = config.api_key or load_api_key(AuthStore(key_file=config.api_key_file))
    if not api_key:
        raise ValidationError("No catalog API key configured. Run: cavectl login")

    credentials: Dict[str, Any] = {}
    download_key_id: Optional[int] = registry.get_download_key(game_id)
    if download_key_id is not None:
        logger.debug(f"Using download key {download_key_id} for game {game_id}")
        credentials["download_key_id"] = download_key_id

    return GameAccess(api_key=api_key, credentials=credentials)
