"""Upload narrowing and classification.

Given every upload of a game, decide which ones can be installed on the
current platform and in what order they should be offered.
"""

from dataclasses import dataclass, field
from typing import List, Optional
import logging

import humanize

from .models import Upload, Build

logger = logging.getLogger(__name__)

# Upload types that are not tied to an operating system
PLATFORM_INDEPENDENT_TYPES = {
    "html",
    "soundtrack",
    "book",
    "video",
    "documentation",
    "mod",
    "audio_assets",
    "graphical_assets",
    "sourcecode",
    "other",
}


@dataclass
class UploadsFilterResult:
    """Uploads before and after narrowing"""

    initial_uploads: List[Upload] = field(default_factory=list)
    uploads: List[Upload] = field(default_factory=list)
    had_untagged: bool = False
    had_wrong_platform: bool = False


def is_compatible(upload: Upload, platform: str) -> bool:
    """Check if an upload can be installed on a platform"""
    if upload.type in PLATFORM_INDEPENDENT_TYPES:
        return True
    return upload.supports(platform)


def _sort_key(upload: Upload):
    # executables before extras, wharf-enabled before plain files
    return (
        upload.type in PLATFORM_INDEPENDENT_TYPES and upload.type != "html",
        upload.build is None and upload.build_id is None,
    )


def narrow_down_uploads(uploads: List[Upload], platform: str) -> UploadsFilterResult:
    """Narrow a game's uploads down to the ones worth offering.

    1. Drop uploads that are not compatible with the platform
    2. Drop demos when a full version is available
    3. Order executables first, wharf-enabled uploads first

    Args:
        uploads: Every upload of the game
        platform: One of windows, linux, osx

    Returns:
        UploadsFilterResult with the initial and narrowed lists
    """
    result = UploadsFilterResult(initial_uploads=list(uploads))

    compatible = []
    for upload in uploads:
        if is_compatible(upload, platform):
            compatible.append(upload)
        elif not upload.platforms:
            result.had_untagged = True
        else:
            result.had_wrong_platform = True

    full_versions = [u for u in compatible if not u.demo]
    if full_versions:
        compatible = full_versions

    result.uploads = sorted(compatible, key=_sort_key)
    logger.debug(
        f"Narrowed {len(result.initial_uploads)} uploads down to {len(result.uploads)} for {platform}"
    )
    return result


def upload_is_probably_external(upload: Upload) -> bool:
    """Check if an upload is not served by the catalog's own storage.

    External uploads point at third-party hosts; the catalog cannot vouch
    for what they contain.
    """
    if upload.storage == "external":
        return True
    if upload.storage == "hosted" and upload.size == 0 and upload.build is None and upload.build_id is None:
        return True
    return False


def format_upload(upload: Upload, build: Optional[Build] = None) -> str:
    """One-line description of an upload for logs and prompts"""
    parts = [f"#{upload.id}", upload.name]

    if upload.size:
        parts.append(f"({humanize.naturalsize(upload.size, binary=True)})")

    if upload.platforms:
        parts.append(f"[{', '.join(upload.platforms)}]")
    elif upload.type != "default":
        parts.append(f"[{upload.type}]")

    if upload.demo:
        parts.append("demo")

    if build is not None:
        version = build.user_version or str(build.version or build.id)
        parts.append(f"build #{build.id} ({version})")

    if upload.storage == "external":
        parts.append("external")

    return " ".join(parts)


def log_upload(upload: Upload, build: Optional[Build] = None, level: int = logging.ERROR) -> None:
    """Log an upload for diagnostics"""
    logger.log(level, f"  - {format_upload(upload, build)}")
