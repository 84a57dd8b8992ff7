"""Catalog entities: games, uploads and builds."""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List


PLATFORMS = ("windows", "linux", "osx")


@dataclass
class Build:
    """A versioned revision of an upload"""

    id: int
    parent_build_id: Optional[int] = None
    version: Optional[int] = None
    user_version: str = ""
    created_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            'id': self.id,
            'parent_build_id': self.parent_build_id,
            'version': self.version,
            'user_version': self.user_version,
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Build':
        """Create build from dictionary"""
        return cls(
            id=int(data['id']),
            parent_build_id=data.get('parent_build_id'),
            version=data.get('version'),
            user_version=data.get('user_version') or "",
            created_at=data.get('created_at'),
        )


@dataclass
class Upload:
    """A distributable file (or wharf channel) attached to a game"""

    id: int
    filename: str = ""
    display_name: str = ""
    size: int = 0
    storage: str = "hosted"  # hosted, build, external
    type: str = "default"  # default, soundtrack, book, video, html, ...
    platforms: List[str] = field(default_factory=list)
    demo: bool = False
    channel_name: str = ""
    build_id: Optional[int] = None
    build: Optional[Build] = None
    updated_at: Optional[str] = None

    @property
    def name(self) -> str:
        """Human-readable name"""
        return self.display_name or self.filename or f"upload-{self.id}"

    def supports(self, platform: str) -> bool:
        """Check if upload is tagged for a platform"""
        return platform in self.platforms

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            'id': self.id,
            'filename': self.filename,
            'display_name': self.display_name,
            'size': self.size,
            'storage': self.storage,
            'type': self.type,
            'platforms': list(self.platforms),
            'demo': self.demo,
            'channel_name': self.channel_name,
            'build_id': self.build_id,
            'build': self.build.to_dict() if self.build else None,
            'updated_at': self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Upload':
        """Create upload from dictionary.

        Accepts both the stored shape (``platforms`` as a list) and the
        catalog shape (``platforms`` as a mapping of platform to arch).
        """
        platforms = data.get('platforms') or []
        if isinstance(platforms, dict):
            platforms = [p for p in PLATFORMS if platforms.get(p)]

        build = data.get('build')
        return cls(
            id=int(data['id']),
            filename=data.get('filename') or "",
            display_name=data.get('display_name') or "",
            size=int(data.get('size') or 0),
            storage=data.get('storage') or "hosted",
            type=data.get('type') or "default",
            platforms=list(platforms),
            demo=bool(data.get('demo', False)),
            channel_name=data.get('channel_name') or "",
            build_id=data.get('build_id'),
            build=Build.from_dict(build) if build else None,
            updated_at=data.get('updated_at'),
        )


@dataclass
class Game:
    """A game page on the catalog"""

    id: int
    title: str = ""
    url: str = ""
    short_text: str = ""
    classification: str = "game"
    type: str = "default"
    published_at: Optional[str] = None

    def __post_init__(self):
        """Validate game identity"""
        if self.id is None:
            raise ValueError("Game id is required")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            'id': self.id,
            'title': self.title,
            'url': self.url,
            'short_text': self.short_text,
            'classification': self.classification,
            'type': self.type,
            'published_at': self.published_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Game':
        """Create game from dictionary"""
        return cls(
            id=int(data['id']),
            title=data.get('title') or "",
            url=data.get('url') or "",
            short_text=data.get('short_text') or "",
            classification=data.get('classification') or "game",
            type=data.get('type') or "default",
            published_at=data.get('published_at'),
        )
