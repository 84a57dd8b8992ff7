"""Cave and install location models for cavectl"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any

from .models import Game, Upload, Build


STAGING_DIR_NAME = "downloads"


@dataclass
class InstallLocation:
    """A named root folder holding caves and staging folders"""

    id: str
    path: Path

    def __post_init__(self):
        if not self.id:
            raise ValueError("Install location id is required")
        if isinstance(self.path, str):
            self.path = Path(self.path)

    def staging_folder(self, job_id: str) -> Path:
        """Get the staging folder for a job under this location"""
        return self.path / STAGING_DIR_NAME / job_id

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'path': str(self.path)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'InstallLocation':
        return cls(id=data['id'], path=Path(data['path']))


@dataclass
class Cave:
    """A persistent record of one installed game at a specific location"""

    id: str
    install_location_id: Optional[str] = None
    install_folder_name: str = ""

    # Last-known catalog state
    game: Optional[Game] = None
    upload: Optional[Upload] = None
    build: Optional[Build] = None

    installed_at: Optional[datetime] = None
    last_touched_at: Optional[datetime] = None

    def install_folder(self, location: InstallLocation) -> Path:
        """Resolve the cave's install folder under a location"""
        return location.path / self.install_folder_name

    @property
    def game_id(self) -> Optional[int]:
        return self.game.id if self.game else None

    def touch(self):
        """Mark cave as touched"""
        self.last_touched_at = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            'id': self.id,
            'install_location_id': self.install_location_id,
            'install_folder_name': self.install_folder_name,
            'game': self.game.to_dict() if self.game else None,
            'upload': self.upload.to_dict() if self.upload else None,
            'build': self.build.to_dict() if self.build else None,
            'installed_at': self.installed_at.isoformat() if self.installed_at else None,
            'last_touched_at': self.last_touched_at.isoformat() if self.last_touched_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Cave':
        """Create cave from dictionary"""
        data = dict(data)
        for field_name in ['installed_at', 'last_touched_at']:
            if data.get(field_name):
                data[field_name] = datetime.fromisoformat(data[field_name])

        data['game'] = Game.from_dict(data['game']) if data.get('game') else None
        data['upload'] = Upload.from_dict(data['upload']) if data.get('upload') else None
        data['build'] = Build.from_dict(data['build']) if data.get('build') else None

        return cls(**data)
