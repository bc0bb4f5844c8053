from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional


@dataclass(frozen=True)
class ClipRequest:
    start: float
    end: float
    label: Optional[str] = None


@dataclass(frozen=True)
class ClipResult:
    index: int
    label: str  # explicit label, or clip_<index>
    filename: str
    path: Path

    def to_entry(self) -> "ClipEntry":
        return ClipEntry(index=self.index, label=self.label, filename=self.filename)


@dataclass(frozen=True)
class JobRequest:
    """A validated /process-video payload."""
    video_url: str
    clips: List[ClipRequest]


@dataclass(frozen=True)
class Job:
    id: str
    source_url: str
    clips: List[ClipRequest]
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class ClipEntry:
    """The part of a ClipResult that is persisted and returned to clients."""
    index: int
    label: str
    filename: str


@dataclass(frozen=True)
class MetadataRecord:
    request_id: str
    original_url: str
    processed_at: str  # ISO-8601, UTC, millisecond precision
    clips: List[ClipEntry] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "requestId": self.request_id,
            "originalUrl": self.original_url,
            "processedAt": self.processed_at,
            "clips": [
                {"index": c.index, "label": c.label, "filename": c.filename}
                for c in self.clips
            ],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MetadataRecord":
        """Rebuild a record from to_dict() output. Missing keys raise KeyError, wrong types TypeError."""
        record = cls(
            request_id=data["requestId"],
            original_url=data["originalUrl"],
            processed_at=data["processedAt"],
            clips=[
                ClipEntry(index=c["index"], label=c["label"], filename=c["filename"])
                for c in data.get("clips", [])
            ],
        )
        strings = [record.request_id, record.original_url, record.processed_at]
        strings += [c.label for c in record.clips] + [c.filename for c in record.clips]
        for value in strings:
            if not isinstance(value, str):
                raise TypeError(f"expected a string, got {type(value).__name__}")
        for clip in record.clips:
            if not isinstance(clip.index, int) or isinstance(clip.index, bool):
                raise TypeError(f"expected an integer clip index, got {clip.index!r}")
        return record


def format_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with milliseconds and a Z suffix, e.g. 2024-05-01T12:00:00.000Z."""
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
