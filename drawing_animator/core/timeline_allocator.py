"""
Timeline Allocator

Base, narration-agnostic schedule. A cursor starts after the leading margin
and only moves forward:

- The first member reached of a group schedules the whole group there:
  every member gets a share of the group budget, back to back.
  Later members of an already scheduled group are skipped.
- An ungrouped element gets its own duration override, or the individual
  default.

Total duration is the final cursor plus the trailing margin. An empty
drawing still yields a valid timeline of the minimum duration.
"""

import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ..config.settings import AnimationConfig, GroupBudgetStrategy
from ..models.data_models import (
    AnimationDescriptor,
    AnimationGroup,
    DrawingElement,
    ElementSlot,
    Timeline,
)
from .descriptor_factory import DescriptorFactory
from .timing import round_ms, split_duration


logger = logging.getLogger(__name__)


class TimelineAllocator:
    """
    Usage:
        allocator = TimelineAllocator(AnimationConfig())
        timeline, descriptors = allocator.allocate(ordered, groups)
    """

    def __init__(self, config: Optional[AnimationConfig] = None, factory: Optional[DescriptorFactory] = None):
        self.config = config or AnimationConfig()
        self.factory = factory or DescriptorFactory(self.config.stroke_fill_ratio)

    def member_share(self, member_count: int) -> int:
        """Even share of the group budget; the extra share is settle time"""
        return round_ms(self.config.group_duration_ms / (member_count + 1))

    def group_durations(self, members: Sequence[DrawingElement]) -> List[int]:
        """Per-member durations for one group, in member order"""
        share = self.member_share(len(members))
        if self.config.group_budget_strategy == GroupBudgetStrategy.COMPLEXITY and len(members) > 1:
            weights = [self.factory.segment_count(m) for m in members]
            return split_duration(share * len(members), weights)
        return [share] * len(members)

    def individual_duration(self, element: DrawingElement) -> int:
        if element.duration_override_ms is not None:
            return element.duration_override_ms
        return self.config.individual_duration_ms

    def allocate(
        self,
        ordered: Sequence[DrawingElement],
        groups: Dict[str, AnimationGroup],
    ) -> Tuple[Timeline, List[AnimationDescriptor]]:
        """
        Schedule resolved elements.

        Args:
            ordered: Elements in reveal order (see OrderResolver)
            groups: Explicit groups keyed by id (see GroupCollector)

        Returns:
            (Timeline, descriptors sorted by start time then resolved order)
        """
        cfg = self.config

        if not ordered:
            logger.info(f"Empty drawing, timeline is the {cfg.min_total_duration_ms}ms minimum")
            timeline = Timeline(
                cursor_ms=cfg.leading_margin_ms,
                total_duration_ms=cfg.min_total_duration_ms,
                groups=dict(groups),
                metadata={"element_count": 0},
            )
            return timeline, []

        by_id: Dict[str, DrawingElement] = {}
        rank_of: Dict[str, int] = {}
        for rank, element in enumerate(ordered):
            by_id.setdefault(element.id, element)
            rank_of.setdefault(element.id, rank)

        cursor = cfg.leading_margin_ms
        scheduled: Set[str] = set()
        slots: List[ElementSlot] = []

        for rank, element in enumerate(ordered):
            group_id = element.primary_group_id
            group = groups.get(group_id) if group_id is not None else None

            if group is None:
                duration = self.individual_duration(element)
                slots.append(ElementSlot(element=element, start_ms=cursor, duration_ms=duration, rank=rank))
                logger.debug(f"{element.id}: {cursor}ms +{duration}ms (individual)")
                cursor += duration
                continue

            if group_id in scheduled:
                continue
            scheduled.add(group_id)

            members = [by_id[m] for m in group.member_ids if m in by_id]
            for member, duration in zip(members, self.group_durations(members)):
                slots.append(ElementSlot(
                    element=member,
                    start_ms=cursor,
                    duration_ms=duration,
                    group_id=group_id,
                    rank=rank_of[member.id],
                ))
                logger.debug(f"{member.id}: {cursor}ms +{duration}ms (group {group_id})")
                cursor += duration

        timeline = Timeline(
            cursor_ms=cursor,
            total_duration_ms=cursor + cfg.trailing_margin_ms,
            slots=slots,
            groups=dict(groups),
            metadata={
                "element_count": len(ordered),
                "group_count": len(scheduled),
                "group_budget_strategy": cfg.group_budget_strategy.value,
            },
        )
        descriptors = self.factory.describe_slots(slots)

        logger.info(
            f"Base timeline: {len(slots)} elements, {len(scheduled)} groups, "
            f"{len(descriptors)} descriptors, {timeline.total_duration_ms}ms"
        )
        return timeline, descriptors
