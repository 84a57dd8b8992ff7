"""Install job data: the request, the draft being resolved, and the result."""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional

from .access import GameAccess
from .cave import Cave, InstallLocation
from .errors import ValidationError
from .models import Game, Upload, Build


REASON_INSTALL = "install"
REASON_REINSTALL = "reinstall"
REASON_UPDATE = "update"
REASON_VERSION_SWITCH = "version-switch"

REASONS = (REASON_INSTALL, REASON_REINSTALL, REASON_UPDATE, REASON_VERSION_SWITCH)


@dataclass(frozen=True)
class InstallRequest:
    """What the caller asked for. Never mutated once received."""

    game: Optional[Game] = None
    cave_id: Optional[str] = None
    install_location_id: Optional[str] = None
    upload: Optional[Upload] = None
    build: Optional[Build] = None
    staging_folder: Optional[str] = None
    install_folder: Optional[str] = None
    no_cave: bool = False
    reason: str = ""
    queue_download: bool = False

    def with_defaults(self, **changes) -> "InstallRequest":
        """Copy of the request with some fields filled in"""
        return replace(self, **changes)


@dataclass
class JobDraft:
    """A job being resolved, field by field.

    The entity resolver fills in identity and location, the catalog
    reconciler fills in game, upload and build. Only the orchestrator
    persists anything, and only once the draft is final.
    """

    id: str
    reason: str
    staging_folder: Path
    game: Optional[Game] = None
    upload: Optional[Upload] = None
    build: Optional[Build] = None
    access: Optional[GameAccess] = None

    no_cave: bool = False
    install_folder: Optional[Path] = None
    install_folder_name: str = ""
    install_location_id: Optional[str] = None

    cave: Optional[Cave] = None
    cave_is_new: bool = False
    cave_changed: bool = False
    location: Optional[InstallLocation] = None

    @property
    def cave_id(self) -> Optional[str]:
        return self.cave.id if self.cave else None

    def finalize(self) -> "ResolvedJob":
        """Freeze the draft into a ResolvedJob.

        Raises:
            ValidationError: If game or upload is still missing
        """
        if self.game is None:
            raise ValidationError("Missing game in install")
        if self.upload is None:
            raise ValidationError("Missing upload in install")
        if self.install_folder is None:
            raise ValidationError("Missing install folder in install")

        return ResolvedJob(
            id=self.id,
            reason=self.reason,
            staging_folder=Path(self.staging_folder),
            install_folder=Path(self.install_folder),
            install_folder_name=self.install_folder_name,
            install_location_id=self.install_location_id,
            game=self.game,
            upload=self.upload,
            build=self.build,
            access=self.access or GameAccess(api_key=""),
            cave_id=self.cave_id,
            no_cave=self.no_cave,
        )


@dataclass(frozen=True)
class ResolvedJob:
    """The fully concrete plan for one install"""

    id: str
    reason: str
    staging_folder: Path
    install_folder: Path
    game: Game
    upload: Upload
    build: Optional[Build] = None
    access: GameAccess = field(default_factory=lambda: GameAccess(api_key=""))
    install_folder_name: str = ""
    install_location_id: Optional[str] = None
    cave_id: Optional[str] = None
    no_cave: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Serializable form, written to the job's metadata file"""
        return {
            'id': self.id,
            'reason': self.reason,
            'staging_folder': str(self.staging_folder),
            'install_folder': str(self.install_folder),
            'install_folder_name': self.install_folder_name,
            'install_location_id': self.install_location_id,
            'game': self.game.to_dict(),
            'upload': self.upload.to_dict(),
            'build': self.build.to_dict() if self.build else None,
            'access': self.access.to_dict(),
            'cave_id': self.cave_id,
            'no_cave': self.no_cave,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], api_key: str = "") -> 'ResolvedJob':
        """Load a job from its metadata file (the API key is not stored)"""
        access = data.get('access') or {}
        return cls(
            id=data['id'],
            reason=data.get('reason') or REASON_INSTALL,
            staging_folder=Path(data['staging_folder']),
            install_folder=Path(data['install_folder']),
            install_folder_name=data.get('install_folder_name') or "",
            install_location_id=data.get('install_location_id'),
            game=Game.from_dict(data['game']),
            upload=Upload.from_dict(data['upload']),
            build=Build.from_dict(data['build']) if data.get('build') else None,
            access=GameAccess(api_key=api_key, credentials=access.get('credentials') or {}),
            cave_id=data.get('cave_id'),
            no_cave=bool(data.get('no_cave', False)),
        )


@dataclass(frozen=True)
class InstallQueueResult:
    """What the caller gets back"""

    id: str
    cave_id: str
    game: Game
    upload: Upload
    build: Optional[Build]
    install_folder: str
    staging_folder: str
    reason: str

    @classmethod
    def from_job(cls, job: ResolvedJob) -> "InstallQueueResult":
        return cls(
            id=job.id,
            cave_id=job.cave_id or "",
            game=job.game,
            upload=job.upload,
            build=job.build,
            install_folder=str(job.install_folder),
            staging_folder=str(job.staging_folder),
            reason=job.reason,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'cave_id': self.cave_id,
            'game': self.game.to_dict(),
            'upload': self.upload.to_dict(),
            'build': self.build.to_dict() if self.build else None,
            'install_folder': self.install_folder,
            'staging_folder': self.staging_folder,
            'reason': self.reason,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'InstallQueueResult':
        return cls(
            id=data['id'],
            cave_id=data.get('cave_id') or "",
            game=Game.from_dict(data['game']),
            upload=Upload.from_dict(data['upload']),
            build=Build.from_dict(data['build']) if data.get('build') else None,
            install_folder=data['install_folder'],
            staging_folder=data['staging_folder'],
            reason=data.get('reason') or REASON_INSTALL,
        )
