from threading import Lock
from typing import Dict, Optional

from clipsplice.domain.models import MetadataRecord


class InMemoryMetadataStore:
    """
    Dict-backed metadata store for tests and throwaway local runs.

    Records vanish with the process; use JsonFileMetadataStore to keep them.
    """

    def __init__(self) -> None:
        self._records: Dict[str, MetadataRecord] = {}
        self._lock = Lock()

    def write(self, job_id: str, record: MetadataRecord) -> None:
        with self._lock:
            self._records[job_id] = record

    def read(self, job_id: str) -> Optional[MetadataRecord]:
        with self._lock:
            return self._records.get(job_id)
