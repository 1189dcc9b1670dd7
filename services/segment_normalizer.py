# services/segment_normalizer.py
"""
Normalization of raw caption segments into TranscriptSegment records.

The YouTube client can hand back segments in three shapes. Which one applies
is decided once, by key presence, in parse_raw_segment():

    transcript_segment_renderer  ->  TranscriptSegmentForm
    cue_group_renderer.cues[0]   ->  CueGroupForm
    anything else                ->  GenericForm

Precedence follows that order. Timing fields are millisecond strings;
offsets and durations in the output are seconds.
"""
import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from schemas.transcript import (
    CueGroupForm,
    CueRenderer,
    GenericForm,
    RawSegment,
    TranscriptSegment,
    TranscriptSegmentForm,
    TranscriptSegmentRenderer,
)
from services.text_utils import decode_html_entities

logger = logging.getLogger(__name__)

_GENERIC_FIELDS = ("text", "runs", "snippet", "start_ms", "end_ms", "duration_ms")


def parse_raw_segment(raw: Any) -> RawSegment:
    """Classify a raw segment dict into one of the tagged segment variants."""
    if not isinstance(raw, dict):
        return GenericForm()

    renderer = raw.get("transcript_segment_renderer")
    if renderer:
        return TranscriptSegmentForm(renderer=TranscriptSegmentRenderer.model_validate(_as_dict(renderer)))

    cue = _first_cue(raw.get("cue_group_renderer"))
    if cue:
        return CueGroupForm(cue=CueRenderer.model_validate(_as_dict(cue)))

    return GenericForm(**{field: raw.get(field) for field in _GENERIC_FIELDS})


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _first_cue(group: Any) -> Any:
    cues = _as_dict(group).get("cues")
    if not isinstance(cues, list) or not cues:
        return None
    return _as_dict(cues[0]).get("cue_renderer")


def _join_runs(runs: List[Any]) -> str:
    # A run without text contributes nothing
    parts = []
    for run in runs:
        text = _as_dict(run).get("text")
        if text is not None:
            parts.append(str(text))
    return "".join(parts)


def _string(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _runs_text(runs: Any) -> Optional[str]:
    return _join_runs(runs) if isinstance(runs, list) and runs else None


def _snippet_text(snippet: Any) -> str:
    snippet = _as_dict(snippet)
    return _string(snippet.get("text")) or _runs_text(snippet.get("runs")) or ""


def parse_ms(value: Any, default: float = 0.0) -> float:
    """
    Parse a millisecond value. Missing or empty values fall back to the default;
    anything that is not a number comes back as NaN.
    """
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def normalize_segment(raw: Any) -> TranscriptSegment:
    """
    Turn one raw segment into a TranscriptSegment with decoded text and timings in seconds.
    Empty text is returned as-is; filtering is up to the caller.
    """
    segment = raw if isinstance(raw, (TranscriptSegmentForm, CueGroupForm, GenericForm)) else parse_raw_segment(raw)

    match segment:
        case TranscriptSegmentForm(renderer=tsr):
            snippet = _as_dict(tsr.snippet)
            text = (
                _string(snippet.get("text"))
                or _string(tsr.text)
                or _runs_text(snippet.get("runs"))
                or _runs_text(tsr.runs)
                or ""
            )
            start = parse_ms(tsr.start_ms)
            offset = start / 1000
            duration = (parse_ms(tsr.end_ms) - start) / 1000

        case CueGroupForm(cue=cue):
            text = _snippet_text(cue.text)
            offset = parse_ms(cue.start_offset_ms) / 1000
            duration = parse_ms(cue.duration_ms) / 1000

        case GenericForm():
            text = _generic_text(segment)
            offset = 0.0
            duration = 0.0
            if segment.start_ms:
                offset = parse_ms(segment.start_ms) / 1000
            if segment.duration_ms:
                duration = parse_ms(segment.duration_ms) / 1000
            elif segment.end_ms and segment.start_ms:
                duration = (parse_ms(segment.end_ms) - parse_ms(segment.start_ms)) / 1000

    return TranscriptSegment(
        text=decode_html_entities(text),
        offset=offset,
        duration=duration,
    )


def _generic_text(segment: GenericForm) -> str:
    if _string(segment.text):
        return segment.text
    if isinstance(segment.text, dict):
        text = _snippet_text(segment.text)
        if text:
            return text
    if isinstance(segment.runs, list):
        return _join_runs(segment.runs)
    return _snippet_text(segment.snippet)


def normalize_segments(raw_segments: Iterable[Any]) -> List[TranscriptSegment]:
    """Normalize every segment in order and drop the ones without text."""
    segments = [normalize_segment(raw) for raw in raw_segments]
    kept = [segment for segment in segments if segment.text]
    if len(kept) != len(segments):
        logger.debug(f"Dropped {len(segments) - len(kept)} empty caption segments")
    return kept
