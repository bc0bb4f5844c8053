import asyncio
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Protocol

from clipsplice.domain.models import (
    ClipResult,
    Job,
    JobRequest,
    MetadataRecord,
    format_timestamp,
)
from clipsplice.infrastructure.downloaders import download_video
from clipsplice.infrastructure.ffmpeg_adapter import extract_clip
from clipsplice.infrastructure.storage import ClipStorage
from clipsplice.infrastructure.subprocess_runner import CancelToken, CommandRunner, run_command

logger = logging.getLogger(__name__)


class MetadataStore(Protocol):
    def write(self, job_id: str, record: MetadataRecord) -> None: ...

    def read(self, job_id: str) -> Optional[MetadataRecord]: ...


def create_job(request: JobRequest) -> Job:
    """
    Give a validated request its own id.
    """
    return Job(id=str(uuid.uuid4()), source_url=request.video_url, clips=list(request.clips))


class JobService:
    """
    Runs one job end to end: download, cut every clip in order, write metadata.

    Each step waits for its subprocess to exit before the next one starts.
    If a step fails, clips already written stay on disk and no metadata is
    written; the error propagates to the caller.
    """

    def __init__(
        self,
        storage: ClipStorage,
        metadata_store: MetadataStore,
        *,
        runner: CommandRunner = run_command,
        cookies_file: Optional[Path] = None,
        job_timeout: float = 0.0,
    ) -> None:
        self.storage = storage
        self.metadata_store = metadata_store
        self.runner = runner
        self.cookies_file = cookies_file
        self.job_timeout = job_timeout

    async def process(self, request: JobRequest, token: Optional[CancelToken] = None) -> MetadataRecord:
        job = create_job(request)
        token = token or CancelToken()
        timer = None
        if self.job_timeout:
            timer = asyncio.get_running_loop().call_later(
                self.job_timeout, token.cancel, f"timed out after {self.job_timeout:g}s"
            )

        logger.info("Job %s: %d clip(s) from %s", job.id, len(job.clips), job.source_url)
        produced: List[ClipResult] = []
        try:
            video_path = await download_video(
                job.source_url,
                self.storage.download_path(job.id),
                cookies_file=self.cookies_file,
                run=self.runner,
                token=token,
            )
            for index, clip in enumerate(job.clips):
                filename = self.storage.clip_filename(job.id, clip.label, index)
                path = await extract_clip(
                    video_path,
                    clip.start,
                    clip.end,
                    self.storage.clip_path(filename),
                    run=self.runner,
                    token=token,
                )
                produced.append(
                    ClipResult(
                        index=index,
                        label=clip.label or f"clip_{index}",
                        filename=filename,
                        path=path,
                    )
                )
        except Exception:
            if produced:
                logger.warning(
                    "Job %s failed after %d of %d clips; leaving %s on disk",
                    job.id,
                    len(produced),
                    len(job.clips),
                    ", ".join(c.filename for c in produced),
                )
            raise
        finally:
            if timer is not None:
                timer.cancel()

        record = MetadataRecord(
            request_id=job.id,
            original_url=job.source_url,
            processed_at=format_timestamp(datetime.now(timezone.utc)),
            clips=[c.to_entry() for c in produced],
        )
        self.metadata_store.write(job.id, record)
        logger.info("Job %s: finished %d clip(s)", job.id, len(produced))
        return record

    def get_metadata(self, job_id: str) -> Optional[MetadataRecord]:
        return self.metadata_store.read(job_id)
