"""
Path construction for downloads, clips and metadata files.

Everything for one job is namespaced by its id, so concurrent jobs never
share a path.
"""
import re
from pathlib import Path
from typing import Optional

CLIP_SUFFIX = ".mp4"
METADATA_SUFFIX = "_metadata.json"

_UNSAFE_LABEL_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def safe_label(label: str) -> str:
    """Make a user label usable inside a filename (path separators and the like become '_')."""
    return _UNSAFE_LABEL_CHARS.sub("_", label)


def is_single_component(name: str) -> bool:
    """True if name is a plain file name: no separators, not '.'/'..', no NUL."""
    if not name or name in (".", "..") or "\x00" in name:
        return False
    return "/" not in name and "\\" not in name


class ClipStorage:
    def __init__(self, downloads_dir: Path, clips_dir: Path) -> None:
        self.downloads_dir = Path(downloads_dir)
        self.clips_dir = Path(clips_dir)

    def ensure_directories(self) -> None:
        self.downloads_dir.mkdir(parents=True, exist_ok=True)
        self.clips_dir.mkdir(parents=True, exist_ok=True)

    def download_path(self, job_id: str) -> Path:
        return self.downloads_dir / f"{job_id}{CLIP_SUFFIX}"

    @staticmethod
    def clip_filename(job_id: str, label: Optional[str], index: int) -> str:
        """<job>_<label>_<index>.mp4, or <job>_clip_<index>.mp4 without a label."""
        stem = safe_label(label) if label else "clip"
        return f"{job_id}_{stem}_{index}{CLIP_SUFFIX}"

    def clip_path(self, filename: str) -> Path:
        return self.clips_dir / filename

    def metadata_path(self, job_id: str) -> Path:
        return self.clips_dir / f"{job_id}{METADATA_SUFFIX}"

    def resolve_clip(self, filename: str) -> Optional[Path]:
        """
        Return the path of an existing clip file, or None.

        Only single-component *.mp4 names that resolve inside the clips
        directory are served; anything else is treated as absent.
        """
        if not is_single_component(filename) or not filename.endswith(CLIP_SUFFIX):
            return None
        path = self.clip_path(filename)
        try:
            resolved = path.resolve()
            root = self.clips_dir.resolve()
        except OSError:
            return None
        if resolved.parent != root or not resolved.is_file():
            return None
        return path
