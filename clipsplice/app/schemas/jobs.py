import math
from typing import Any, List, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
    model_validator,
)

from clipsplice.app.schemas.clips import ClipOut
from clipsplice.domain.errors import InvalidJobRequest
from clipsplice.domain.models import ClipRequest, JobRequest, MetadataRecord

# bool is rejected by both strict types
Seconds = Union[StrictInt, StrictFloat]


class TimestampIn(BaseModel):
    start: Seconds
    end: Seconds
    label: Optional[StrictStr] = None

    @field_validator("start", "end", mode="before")
    @classmethod
    def reject_oversized(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                float(value)
            except OverflowError:
                raise ValueError("too large to be a number of seconds") from None
        return value

    @field_validator("start", "end")
    @classmethod
    def check_finite(cls, value: Union[int, float]) -> Union[int, float]:
        if not math.isfinite(value):
            raise ValueError("must be a finite number")
        return value

    @model_validator(mode="after")
    def check_order(self) -> "TimestampIn":
        if self.start >= self.end:
            raise ValueError("start must be before end")
        return self


class ProcessVideoRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    video_url: StrictStr = Field(alias="videoUrl")
    timestamps: List[TimestampIn] = Field(min_length=1)

    @field_validator("video_url")
    @classmethod
    def check_url(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    def to_job_request(self) -> JobRequest:
        return JobRequest(
            video_url=self.video_url,
            clips=[ClipRequest(start=t.start, end=t.end, label=t.label or None) for t in self.timestamps],
        )


def _error_rank(loc: Tuple[Any, ...]) -> Tuple[int, int, int]:
    """Order errors the way a client reads the body: URL, then the array, then entries by index."""
    if not loc:
        return (0, 0, 0)
    if loc[0] in ("videoUrl", "video_url"):
        return (1, 0, 0)
    if len(loc) < 2 or not isinstance(loc[1], int):
        return (2, 0, 0)
    return (3, loc[1], 1 if "label" in loc[2:] else 0)


def _message(error: dict) -> InvalidJobRequest:
    loc = tuple(error["loc"])
    rank, index, is_label = _error_rank(loc)
    if rank == 0:
        return InvalidJobRequest("Request body must be a JSON object")
    if rank == 1:
        return InvalidJobRequest("Video URL is required")
    if rank == 2:
        return InvalidJobRequest("Valid timestamps array is required")
    if is_label:
        return InvalidJobRequest(f"Invalid label at index {index}", index=index)
    return InvalidJobRequest(f"Invalid timestamp pair at index {index}", index=index)


def parse_job_request(payload: Any) -> JobRequest:
    """
    Validate a raw /process-video body.

    Raises InvalidJobRequest for the first problem found, reading the body in
    order; timestamp problems carry the index of the offending entry.
    """
    try:
        body = ProcessVideoRequest.model_validate(payload)
    except ValidationError as e:
        first = min(e.errors(), key=lambda err: _error_rank(tuple(err["loc"])))
        raise _message(first) from None
    return body.to_job_request()


class ProcessVideoResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    request_id: str = Field(alias="requestId")
    message: str
    clips: List[ClipOut]


class MetadataOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    request_id: str = Field(alias="requestId")
    original_url: str = Field(alias="originalUrl")
    processed_at: str = Field(alias="processedAt")
    clips: List[ClipOut] = []

    @classmethod
    def from_record(cls, record: MetadataRecord) -> "MetadataOut":
        return cls(
            request_id=record.request_id,
            original_url=record.original_url,
            processed_at=record.processed_at,
            clips=[ClipOut(index=c.index, label=c.label, filename=c.filename) for c in record.clips],
        )
