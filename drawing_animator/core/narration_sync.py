"""
Narration Synchronizer

Re-times a base schedule against measured voiceover.

Each narration segment is bound to a group: an explicit group of the base
timeline, or else an implicit run over its ungrouped elements. The segment's
audio duration is split evenly across the group's members, starting at the
narration cursor; the cursor then moves past the audio and, before the next
segment, a fixed pause.

Elements no segment covers follow the narration, at their base duration
divided by the speed factor (narration pace relative to base pace, clamped).
"""

import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ..config.settings import AnimationConfig
from ..models.data_models import (
    AnimationDescriptor,
    AnimationGroup,
    ElementSlot,
    NarrationSegment,
    SegmentPlacement,
    Timeline,
)
from .descriptor_factory import DescriptorFactory
from .group_collector import GroupCollector
from .timing import clamp, round_ms, split_duration, to_frame


logger = logging.getLogger(__name__)


class NarrationSynchronizer:
    """
    Usage:
        sync = NarrationSynchronizer(config)
        timeline, descriptors = sync.synchronize(base_timeline, base_descriptors, segments)
    """

    def __init__(
        self,
        config: Optional[AnimationConfig] = None,
        factory: Optional[DescriptorFactory] = None,
        collector: Optional[GroupCollector] = None,
    ):
        self.config = config or AnimationConfig()
        self.factory = factory or DescriptorFactory(self.config.stroke_fill_ratio)
        self.collector = collector or GroupCollector(self.config.max_run_length)

    def speed_factor(self, base_ms: int, narration_ms: int, covered: int) -> float:
        """Base pace over narration pace for covered elements, clamped"""
        low, high = self.config.speed_factor_bounds
        if covered == 0:
            return clamp(1.0, low, high)
        if narration_ms <= 0:
            return high
        return clamp(base_ms / narration_ms, low, high)

    def resolve_groups(self, base_timeline: Timeline) -> Dict[str, AnimationGroup]:
        """Groups a segment may reference: explicit groups first, then implicit runs"""
        runs = self.collector.collect_runs([slot.element for slot in base_timeline.slots])
        resolved = dict(runs)
        resolved.update(base_timeline.groups)
        return resolved

    def synchronize(
        self,
        base_timeline: Timeline,
        base_descriptors: List[AnimationDescriptor],
        segments: Sequence[NarrationSegment],
    ) -> Tuple[Timeline, List[AnimationDescriptor]]:
        if not segments:
            logger.info("No narration segments, keeping base timeline")
            return base_timeline, base_descriptors

        cfg = self.config
        ordered_segments = sorted(segments, key=lambda s: s.position)
        groups = self.resolve_groups(base_timeline)

        base_slots: Dict[str, ElementSlot] = {}
        for slot in base_timeline.slots:
            base_slots.setdefault(slot.element_id, slot)

        cursor = 0
        narrated: Set[str] = set()
        covered: Set[str] = set()
        slots: List[ElementSlot] = []
        placements: List[SegmentPlacement] = []
        base_sum = 0
        narration_sum = 0
        unmatched: List[str] = []

        for index, segment in enumerate(ordered_segments):
            if index > 0:
                cursor += cfg.narration_pause_ms

            members: List[ElementSlot] = []
            group = groups.get(segment.group_id)
            if group is None:
                logger.warning(f"Narration segment references unknown group '{segment.group_id}', skipping")
                unmatched.append(segment.group_id)
            elif segment.group_id in narrated:
                logger.warning(f"Group '{segment.group_id}' is already narrated, segment covers no elements")
                unmatched.append(segment.group_id)
            else:
                narrated.add(segment.group_id)
                members = [
                    base_slots[m] for m in group.member_ids
                    if m in base_slots and m not in covered
                ]

            shares = split_duration(segment.audio_duration_ms, [1.0] * len(members))
            start = cursor
            for base_slot, share in zip(members, shares):
                slots.append(ElementSlot(
                    element=base_slot.element,
                    start_ms=start,
                    duration_ms=share,
                    group_id=base_slot.group_id,
                    rank=base_slot.rank,
                ))
                covered.add(base_slot.element_id)
                base_sum += base_slot.duration_ms
                narration_sum += share
                start += share

            end = cursor + segment.audio_duration_ms
            placements.append(SegmentPlacement(
                group_id=segment.group_id,
                audio_start_ms=cursor,
                audio_end_ms=end,
                start_frame=to_frame(cursor, cfg.frame_rate),
                end_frame=to_frame(end, cfg.frame_rate),
                element_ids=[s.element_id for s in members],
                text=segment.text,
            ))
            cursor = end

        narration_end = cursor
        factor = self.speed_factor(base_sum, narration_sum, len(covered))

        leftovers = [slot for slot in base_timeline.slots if slot.element_id not in covered]
        for base_slot in leftovers:
            element = base_slot.element
            base_duration = (
                element.duration_override_ms
                if element.duration_override_ms is not None
                else cfg.individual_duration_ms
            )
            duration = round_ms(base_duration / factor)
            slots.append(ElementSlot(
                element=element,
                start_ms=cursor,
                duration_ms=duration,
                group_id=base_slot.group_id,
                rank=base_slot.rank,
            ))
            cursor += duration

        timeline = Timeline(
            cursor_ms=cursor,
            total_duration_ms=cursor + cfg.trailing_margin_ms,
            slots=slots,
            groups=dict(base_timeline.groups),
            sync_method="narration",
            speed_factor=factor,
            segment_placements=placements,
            metadata={
                "segment_count": len(ordered_segments),
                "narration_end_ms": narration_end,
                "covered_element_count": len(covered),
                "uncovered_element_count": len(leftovers),
                "unmatched_groups": unmatched,
                "base_total_duration_ms": base_timeline.total_duration_ms,
            },
        )
        descriptors = self.factory.describe_slots(slots)

        logger.info(
            f"Narration timeline: {len(ordered_segments)} segments, {len(covered)} covered, "
            f"{len(leftovers)} appended, speed {factor:.2f}x, {timeline.total_duration_ms}ms"
        )
        return timeline, descriptors
