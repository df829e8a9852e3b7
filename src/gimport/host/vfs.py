"""Local file system resolution."""

from dataclasses import dataclass
from pathlib import Path

from gimport.host.interfaces import IVirtualFileSystem


@dataclass(frozen=True)
class VirtualFile:
    """Resolved file handle."""

    path: Path
    is_directory: bool

    @property
    def canonical_path(self) -> str:
        return self.path.resolve().as_posix()


class LocalFileSystem(IVirtualFileSystem):
    """Resolves paths against the local disk."""

    def find_file_by_path(self, path: str) -> VirtualFile | None:
        candidate = Path(path)
        if not candidate.exists():
            return None
        return VirtualFile(path=candidate, is_directory=candidate.is_dir())
