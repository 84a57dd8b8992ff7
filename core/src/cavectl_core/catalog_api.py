"""Catalog REST API client for cavectl"""

from typing import Any, Dict, List, Optional
import logging

import httpx

from .catalog_http import CatalogHttp, CatalogApiError
from .models import Game, Upload
from .uploads import UploadsFilterResult, narrow_down_uploads

logger = logging.getLogger(__name__)

# Re-export for convenience
__all__ = ["CatalogAPI", "CatalogApiError"]


class CatalogAPI:
    """REST interface to the game catalog.

    Credentials are passed per call: they depend on the game being accessed
    (e.g. a download key), not on the client.
    """

    DEFAULT_BASE_URL = CatalogHttp.DEFAULT_BASE_URL

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_s: float = 30.0,
        rate_limit_s: float = 0.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not api_key:
            raise ValueError("Missing catalog API key")

        self.http = CatalogHttp(
            api_key=api_key,
            base_url=base_url,
            timeout_s=timeout_s,
            rate_limit_s=rate_limit_s,
            transport=transport,
        )
        logger.debug(f"CatalogAPI initialized with base_url={base_url}")

    def close(self) -> None:
        """Close the HTTP client."""
        self.http.close()

    def __enter__(self) -> "CatalogAPI":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    @staticmethod
    def _credential_params(credentials: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        params = {}
        if credentials and credentials.get("download_key_id"):
            params["download_key_id"] = credentials["download_key_id"]
        return params

    # =========================================================================
    # Profile
    # =========================================================================

    def get_profile(self) -> Dict[str, Any]:
        """Fetch the profile of the user owning the API key.

        Raises:
            CatalogApiError: If the key is rejected
        """
        data = self.http.get("/profile")
        if isinstance(data, dict) and isinstance(data.get("user"), dict):
            return data["user"]
        return {}

    # =========================================================================
    # Games
    # =========================================================================

    def get_game(self, game_id: int, credentials: Optional[Dict[str, Any]] = None) -> Game:
        """Fetch fresh game metadata.

        Args:
            game_id: Catalog game ID
            credentials: Access credentials for the game

        Returns:
            Game

        Raises:
            CatalogApiError: On API error or malformed response
        """
        data = self.http.get(f"/games/{game_id}", params=self._credential_params(credentials))

        if not isinstance(data, dict) or not isinstance(data.get("game"), dict):
            raise CatalogApiError(0, f"Malformed response for game {game_id}", payload=data)
        return Game.from_dict(data["game"])

    # =========================================================================
    # Uploads
    # =========================================================================

    def list_game_uploads(self, game_id: int, credentials: Optional[Dict[str, Any]] = None) -> List[Upload]:
        """List every upload of a game, with their current builds.

        Args:
            game_id: Catalog game ID
            credentials: Access credentials for the game

        Returns:
            List of uploads

        Raises:
            CatalogApiError: On API error
        """
        data = self.http.get(f"/games/{game_id}/uploads", params=self._credential_params(credentials))

        # Normalize response shape
        if isinstance(data, dict) and "uploads" in data:
            items = data["uploads"] or []
        elif isinstance(data, list):
            items = data
        else:
            items = []

        return [Upload.from_dict(item) for item in items]

    def get_filtered_uploads(
        self,
        game: Game,
        credentials: Optional[Dict[str, Any]],
        platform: str,
    ) -> UploadsFilterResult:
        """List a game's uploads and narrow them down for a platform.

        Args:
            game: Game to list uploads for
            credentials: Access credentials for the game
            platform: One of windows, linux, osx

        Returns:
            UploadsFilterResult

        Raises:
            CatalogApiError: On API error
        """
        uploads = self.list_game_uploads(game.id, credentials)
        result = narrow_down_uploads(uploads, platform)

        if result.had_untagged:
            logger.info("Some uploads were not tagged with any platform, they were skipped")
        if result.had_wrong_platform:
            logger.info(f"Some uploads were for other platforms than {platform}")

        return result
