import json
import logging
from typing import Optional

from clipsplice.domain.models import MetadataRecord
from clipsplice.infrastructure.storage import ClipStorage, is_single_component

logger = logging.getLogger(__name__)


class JsonFileMetadataStore:
    """
    One indented JSON file per job, next to its clips.

    No locking: each job writes only its own file.
    """

    def __init__(self, storage: ClipStorage) -> None:
        self._storage = storage

    def write(self, job_id: str, record: MetadataRecord) -> None:
        path = self._storage.metadata_path(job_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(record.to_dict(), indent=2), encoding="utf-8")
        logger.info("Wrote metadata for job %s to %s", job_id, path)

    def read(self, job_id: str) -> Optional[MetadataRecord]:
        if not is_single_component(job_id):
            return None
        path = self._storage.metadata_path(job_id)
        if not path.is_file():
            return None
        try:
            return MetadataRecord.from_dict(json.loads(path.read_text(encoding="utf-8")))
        except (ValueError, KeyError, TypeError) as e:
            # JSONDecodeError and UnicodeDecodeError are ValueErrors
            logger.warning("Unreadable metadata file %s: %s", path, e)
            return None
