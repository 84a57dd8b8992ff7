"""Interactive capabilities the install queue may call out to.

Both calls can block for as long as a human takes to answer. Cancellation is
an ordinary return value: a negative index, or ``accept=False``.
"""

from dataclasses import dataclass
from typing import List, Protocol

from .models import Upload


@dataclass(frozen=True)
class PickUploadResult:
    """Index into the offered uploads, negative when the user cancelled"""
    index: int

    @property
    def aborted(self) -> bool:
        return self.index < 0


@dataclass(frozen=True)
class ExternalUploadResult:
    """Whether the user accepts installing an external upload"""
    accept: bool


class UploadChooser(Protocol):
    """Picks one upload out of several compatible ones."""

    def pick_upload(self, uploads: List[Upload]) -> PickUploadResult:
        ...


class ExternalUploadConfirmer(Protocol):
    """Asks whether an upload hosted outside the catalog may be installed."""

    def confirm_external_upload(self, upload: Upload) -> ExternalUploadResult:
        ...


class FirstUploadChooser:
    """Non-interactive chooser: always takes the best-ranked upload"""

    def pick_upload(self, uploads: List[Upload]) -> PickUploadResult:
        return PickUploadResult(index=0 if uploads else -1)


class StaticConfirmer:
    """Non-interactive confirmer with a fixed answer"""

    def __init__(self, accept: bool):
        self.accept = accept

    def confirm_external_upload(self, upload: Upload) -> ExternalUploadResult:
        return ExternalUploadResult(accept=self.accept)
