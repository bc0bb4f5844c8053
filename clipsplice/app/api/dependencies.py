from fastapi import Request

from clipsplice.domain.services.job_service import JobService
from clipsplice.infrastructure.storage import ClipStorage


def get_job_service(request: Request) -> JobService:
    return request.app.state.job_service


def get_storage(request: Request) -> ClipStorage:
    return request.app.state.storage
