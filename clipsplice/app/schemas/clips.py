from pydantic import BaseModel


class ClipOut(BaseModel):
    index: int
    label: str
    filename: str
