"""
Narration Script Builder

Template narration for a scheduled drawing: one passage per explicit group
and per implicit run, in base schedule order, with an estimated spoken
duration and a voice. Once the audio collaborator has measured the real
durations, the script becomes the NarrationSegment list the synchronizer
consumes.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..config.settings import AnimationConfig
from ..models.data_models import (
    DrawingElement,
    ElementKind,
    ElementSlot,
    NarrationSegment,
    SegmentPlacement,
    Timeline,
)
from .group_collector import GroupCollector
from .timing import round_ms, to_frame


logger = logging.getLogger(__name__)


TEMPLATES = {
    ElementKind.RECTANGLE: "Here we have a rectangle representing {description}",
    ElementKind.ARROW: "This arrow shows the flow between {description}",
    ElementKind.TEXT: "The text reads: {content}",
    ElementKind.ELLIPSE: "This circle represents {description}",
    ElementKind.LINE: "A line connecting {description}",
    ElementKind.FREEHAND: "A freehand drawing illustrating {description}",
}
FALLBACK_TEMPLATE = "Next, we see {description}"

DESCRIPTIONS = {
    ElementKind.RECTANGLE: "a box",
    ElementKind.DIAMOND: "a decision",
    ElementKind.ARROW: "an arrow",
    ElementKind.ELLIPSE: "a circle",
    ElementKind.LINE: "a connecting line",
    ElementKind.FREEHAND: "a sketch",
    ElementKind.IMAGE: "an image",
}

EMPHASIS_KEYWORD = "important"


@dataclass
class ScriptSegment:
    """One narrated passage, before audio exists"""
    group_id: str
    text: str
    estimated_duration_ms: int
    voice: str
    kind: ElementKind
    element_ids: List[str] = field(default_factory=list)
    start_ms: int = 0   # Span of the group on the base timeline
    end_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "group_id": self.group_id,
            "text": self.text,
            "estimated_duration_ms": self.estimated_duration_ms,
            "voice": self.voice,
            "kind": self.kind.value,
            "element_ids": list(self.element_ids),
            "start_ms": self.start_ms,
            "end_ms": self.end_ms,
        }


class NarrationScriptBuilder:

    def __init__(self, config: Optional[AnimationConfig] = None, collector: Optional[GroupCollector] = None):
        self.config = config or AnimationConfig()
        self.collector = collector or GroupCollector(self.config.max_run_length)

    @staticmethod
    def describe_element(element: DrawingElement) -> str:
        if element.kind == ElementKind.TEXT:
            return element.text or "text"
        return DESCRIPTIONS.get(element.kind, element.kind.value)

    def narrate(self, kind: ElementKind, elements: Sequence[DrawingElement]) -> str:
        if kind == ElementKind.TEXT and elements and elements[0].text:
            return TEMPLATES[ElementKind.TEXT].format(content=elements[0].text)
        description = ", ".join(self.describe_element(e) for e in elements)
        template = TEMPLATES.get(kind, FALLBACK_TEMPLATE)
        if kind == ElementKind.TEXT:
            template = FALLBACK_TEMPLATE
        return template.format(description=description)

    def estimate_duration_ms(self, text: str) -> int:
        """Spoken duration at the configured words-per-minute rate"""
        words = len(text.split())
        return round_ms(words / self.config.words_per_minute * 60000)

    def select_voice(self, kind: ElementKind, elements: Sequence[DrawingElement]) -> str:
        if kind == ElementKind.TEXT and elements and EMPHASIS_KEYWORD in (elements[0].text or "").lower():
            return self.config.emphasis_voice
        if kind == ElementKind.FREEHAND:
            return self.config.creative_voice
        return self.config.default_voice

    def build_script(self, timeline: Timeline) -> List[ScriptSegment]:
        """One segment per explicit group and per implicit run, in schedule order"""
        runs = self.collector.collect_runs([slot.element for slot in timeline.slots])
        run_of: Dict[str, str] = {}
        for run_id, run in runs.items():
            for member_id in run.member_ids:
                run_of.setdefault(member_id, run_id)

        passages: Dict[str, List[ElementSlot]] = {}
        for slot in timeline.slots:
            key = slot.group_id or run_of.get(slot.element_id)
            if key is None:
                continue
            passages.setdefault(key, []).append(slot)

        script: List[ScriptSegment] = []
        for group_id, slots in passages.items():
            elements = [slot.element for slot in slots]
            run = runs.get(group_id)
            kind = run.kind if run is not None and run.kind is not None else elements[0].kind
            text = self.narrate(kind, elements)
            script.append(ScriptSegment(
                group_id=group_id,
                text=text,
                estimated_duration_ms=self.estimate_duration_ms(text),
                voice=self.select_voice(kind, elements),
                kind=kind,
                element_ids=[e.id for e in elements],
                start_ms=min(slot.start_ms for slot in slots),
                end_ms=max(slot.end_ms for slot in slots),
            ))

        logger.info(f"Narration script: {len(script)} segments for {len(timeline.slots)} elements")
        return script

    def to_narration_segments(
        self,
        script: Sequence[ScriptSegment],
        measured_durations_ms: Optional[Mapping[str, int]] = None,
    ) -> List[NarrationSegment]:
        """
        Bind measured audio durations to the script.

        Measured durations are keyed by group id; segments without a
        measurement keep their estimate.
        """
        measured = measured_durations_ms or {}
        segments = []
        for position, passage in enumerate(script):
            duration = measured.get(passage.group_id)
            if duration is None:
                logger.debug(f"No measured audio for '{passage.group_id}', using estimate")
                duration = passage.estimated_duration_ms
            segments.append(NarrationSegment(
                group_id=passage.group_id,
                text=passage.text,
                audio_duration_ms=duration,
                position=position,
            ))
        return segments

    def build_audio_timeline(
        self,
        segments: Sequence[NarrationSegment],
        script: Optional[Sequence[ScriptSegment]] = None,
    ) -> List[SegmentPlacement]:
        """
        Audio-side timeline: segments back to back from 0 with a pause
        between them, and the frame span each one occupies.
        """
        element_ids = {passage.group_id: passage.element_ids for passage in script or []}
        placements = []
        cursor = 0
        for index, segment in enumerate(sorted(segments, key=lambda s: s.position)):
            if index > 0:
                cursor += self.config.narration_pause_ms
            end = cursor + segment.audio_duration_ms
            placements.append(SegmentPlacement(
                group_id=segment.group_id,
                audio_start_ms=cursor,
                audio_end_ms=end,
                start_frame=to_frame(cursor, self.config.frame_rate),
                end_frame=to_frame(end, self.config.frame_rate),
                element_ids=list(element_ids.get(segment.group_id, [])),
                text=segment.text,
            ))
            cursor = end
        return placements
