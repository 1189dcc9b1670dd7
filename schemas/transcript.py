# Models
import math
from pydantic import BaseModel, ConfigDict, field_serializer
from typing import Any, List, Literal, Optional, Union


class TranscriptRequest(BaseModel):
    id: Optional[str] = None
    clientIp: str


class TranscriptSegment(BaseModel):
    text: str
    offset: float
    duration: float

    @field_serializer("offset", "duration")
    def serialize_seconds(self, value: float) -> Optional[float]:
        # Malformed upstream timings are reported as null rather than NaN
        return value if math.isfinite(value) else None


class TranscriptResponse(BaseModel):
    videoTitle: str
    transcript: List[TranscriptSegment]


class ErrorResponse(BaseModel):
    error: str
    videoId: Optional[str] = None
    videoTitle: Optional[str] = None


# Raw caption segments, as handed back by the YouTube client.
# Payload fields are loosely typed: text may be a string or a snippet dict
# ({text, runs}), runs a list of {text} dicts, and millisecond values are
# usually strings but may arrive as numbers. Shape checks happen when the
# text and timings are read, so an odd field never rejects the segment.


class RawModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class TranscriptSegmentRenderer(RawModel):
    snippet: Any = None
    text: Any = None
    runs: Any = None
    start_ms: Any = None
    end_ms: Any = None


class CueRenderer(RawModel):
    text: Any = None
    start_offset_ms: Any = None
    duration_ms: Any = None


class TranscriptSegmentForm(RawModel):
    kind: Literal["transcript_segment"] = "transcript_segment"
    renderer: TranscriptSegmentRenderer


class CueGroupForm(RawModel):
    kind: Literal["cue_group"] = "cue_group"
    cue: CueRenderer


class GenericForm(RawModel):
    kind: Literal["generic"] = "generic"
    text: Any = None
    runs: Any = None
    snippet: Any = None
    start_ms: Any = None
    end_ms: Any = None
    duration_ms: Any = None


RawSegment = Union[TranscriptSegmentForm, CueGroupForm, GenericForm]
