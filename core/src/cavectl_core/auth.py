"""Catalog API key storage for cavectl.

Supports:
- Keyring storage (macOS Keychain, Windows Credential Manager, Linux Secret Service)
- Fallback to file-based storage when no keyring backend works
- Environment variable override for CI/automation
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
from pathlib import Path
import os
import stat
import logging

import keyring
from keyring.errors import KeyringError

logger = logging.getLogger(__name__)

SERVICE = "cavectl"
API_KEY_NAME = "catalog_api_key"
ENV_VAR = "CAVECTL_API_KEY"


@dataclass
class AuthStore:
    """Configuration for API key storage."""
    key_file: Optional[Path] = None

    def __post_init__(self):
        if isinstance(self.key_file, str):
            self.key_file = Path(self.key_file)


def save_api_key(api_key: str, store: AuthStore) -> str:
    """Save the catalog API key.

    Args:
        api_key: The key to save
        store: AuthStore configuration

    Returns:
        Where the key was stored: "keyring" or "file"

    Raises:
        ValueError: If key is empty
        RuntimeError: If no storage mechanism available
    """
    api_key = api_key.strip()
    if not api_key:
        raise ValueError("Empty API key")

    try:
        keyring.set_password(SERVICE, API_KEY_NAME, api_key)
        logger.info("API key saved to system keyring")
        return "keyring"
    except KeyringError as e:
        logger.warning(f"Keyring save failed, falling back to file: {e}")

    if not store.key_file:
        raise RuntimeError("No keyring available and no key_file configured")

    store.key_file.parent.mkdir(parents=True, exist_ok=True)
    store.key_file.write_text(api_key)

    # chmod 600
    try:
        os.chmod(store.key_file, stat.S_IRUSR | stat.S_IWUSR)
    except OSError:
        pass  # Windows may not support chmod

    logger.info(f"API key saved to {store.key_file}")
    return "file"


def load_api_key(store: AuthStore) -> Optional[str]:
    """Load the catalog API key.

    Checks in order:
    1. Environment variable CAVECTL_API_KEY
    2. System keyring
    3. Key file

    Returns:
        Key string or None if not found
    """
    env_key = os.getenv(ENV_VAR)
    if env_key:
        logger.debug("Using API key from environment variable")
        return env_key.strip()

    try:
        api_key = keyring.get_password(SERVICE, API_KEY_NAME)
        if api_key:
            logger.debug("Using API key from system keyring")
            return api_key.strip()
    except KeyringError as e:
        logger.debug(f"Keyring read failed: {e}")

    if store.key_file and store.key_file.exists():
        api_key = store.key_file.read_text().strip()
        if api_key:
            logger.debug(f"Using API key from {store.key_file}")
            return api_key

    return None


def delete_api_key(store: AuthStore) -> None:
    """Delete the stored API key from keyring and file storage."""
    try:
        keyring.delete_password(SERVICE, API_KEY_NAME)
        logger.info("API key removed from system keyring")
    except KeyringError as e:
        logger.debug(f"Keyring delete (expected if empty): {e}")

    if store.key_file and store.key_file.exists():
        store.key_file.unlink()
        logger.info(f"API key file removed: {store.key_file}")
