"""Human-friendly job identifiers.

Job IDs double as staging folder names, so they are checked against the
entries already present under the base path.
"""

from pathlib import Path
from typing import Union
import logging
import os
import uuid

import petname

from .errors import EnvironmentFailure

logger = logging.getLogger(__name__)

MAX_TRIES = 100


def random_words(count: int = 3, separator: str = "-") -> str:
    """Generate a random name like ``gently-brave-otter``"""
    if count < 1:
        raise ValueError("count must be at least 1")
    return petname.generate(count, separator)


def new_uuid() -> str:
    """Generate a UUID v4 string.

    Raises:
        EnvironmentFailure: If the system random source is unusable
    """
    try:
        return str(uuid.uuid4())
    except (OSError, NotImplementedError) as e:
        raise EnvironmentFailure(f"Could not generate UUID: {e}") from e


def generate_id(base_path: Union[str, Path]) -> str:
    """Generate a job ID that does not collide with entries under base_path.

    Tries MAX_TRIES three-word names before falling back to a UUID v4, which
    is not checked.

    Args:
        base_path: Directory the ID will be used under

    Returns:
        Lowercase hyphenated ID, or a UUID string

    Raises:
        EnvironmentFailure: If the fallback UUID cannot be generated
    """
    base_path = Path(base_path)

    for _ in range(MAX_TRIES):
        candidate = random_words(3, "-")
        try:
            os.lstat(base_path / candidate)
        except FileNotFoundError:
            return candidate
        except OSError as e:
            # only a definite "does not exist" frees a name
            logger.debug(f"Could not check {candidate}: {e}")

    logger.warning(f"Could not find a free name under {base_path} after {MAX_TRIES} tries, using a UUID")
    return new_uuid()
