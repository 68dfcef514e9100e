from __future__ import annotations

import codecs
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class DetectOptions(BaseModel):
    exclude: List[str] = Field(default_factory=list, examples=[[":", "|"]])
    include: List[str] = Field(default_factory=list, examples=[["~"]])
    lucky: bool = False
    trace: bool = False
    # None means sniff the encoding from the first bytes of the file
    encoding: Optional[str] = Field(default=None, examples=["utf-8"])

    @field_validator("encoding")
    @classmethod
    def _known_codec(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            try:
                codecs.lookup(value)
            except LookupError as exc:
                raise ValueError(f"unknown encoding: {value}") from exc
        return value


class CandidateStats(BaseModel):
    separator: str
    mean: float
    stdev: float
    samples: int


class DetectionResult(BaseModel):
    separators: List[str]
    lucky: bool = False
    ranked: bool = False
    lines_read: int = 0
    encoding: str
    stats: List[CandidateStats] = Field(default_factory=list)


class DetectResponse(BaseModel):
    filename: str
    separator: str
    result: DetectionResult


class HealthResponse(BaseModel):
    ok: bool = True
