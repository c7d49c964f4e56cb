"""
Animation Planner

Entry point wiring the timing engine together:

    elements -> OrderResolver -> GroupCollector -> TimelineAllocator
             -> [NarrationSynchronizer] -> sorted descriptors + total duration
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..config.settings import AnimationConfig
from ..models.data_models import (
    AnimationDescriptor,
    AnimationPlan,
    DrawingElement,
    NarrationSegment,
    Timeline,
    load_elements,
)
from .descriptor_factory import DescriptorFactory
from .group_collector import GroupCollector
from .narration_script import NarrationScriptBuilder, ScriptSegment
from .narration_sync import NarrationSynchronizer
from .order_resolver import OrderResolver
from .timeline_allocator import TimelineAllocator


logger = logging.getLogger(__name__)

ElementsInput = Union[Dict[str, Any], Sequence[Union[DrawingElement, Dict[str, Any]]]]
NarrationInput = Sequence[Union[NarrationSegment, Dict[str, Any]]]


class AnimationPlanner:
    """
    Usage:
        planner = AnimationPlanner(get_preset("slow_lecture"))
        plan = planner.plan(document["elements"], narration=segments)
        renderer.play(plan.to_dict())
    """

    def __init__(self, config: Optional[AnimationConfig] = None):
        self.config = config or AnimationConfig()
        self.resolver = OrderResolver()
        self.collector = GroupCollector(self.config.max_run_length)
        self.factory = DescriptorFactory(self.config.stroke_fill_ratio)
        self.allocator = TimelineAllocator(self.config, self.factory)
        self.synchronizer = NarrationSynchronizer(self.config, self.factory, self.collector)
        self.script_builder = NarrationScriptBuilder(self.config, self.collector)

    def base_timeline(self, elements: ElementsInput) -> Tuple[Timeline, List[AnimationDescriptor]]:
        drawing = load_elements(elements)
        ordered = self.resolver.resolve(drawing)
        groups = self.collector.collect(ordered)
        return self.allocator.allocate(ordered, groups)

    def plan(self, elements: ElementsInput, narration: Optional[NarrationInput] = None) -> AnimationPlan:
        """
        Build the animation plan for a drawing.

        Narration records are validated before any scheduling, so a bad
        audio duration fails without producing a partial plan.
        """
        segments = [
            s if isinstance(s, NarrationSegment) else NarrationSegment.model_validate(s)
            for s in narration or []
        ]

        timeline, descriptors = self.base_timeline(elements)
        if segments:
            timeline, descriptors = self.synchronizer.synchronize(timeline, descriptors, segments)

        return AnimationPlan(timeline=timeline, descriptors=descriptors)

    def narration_script(self, elements: ElementsInput) -> List[ScriptSegment]:
        """Template narration for a drawing, to hand to the audio generator"""
        timeline, _ = self.base_timeline(elements)
        return self.script_builder.build_script(timeline)


def plan_animation(
    elements: ElementsInput,
    narration: Optional[NarrationInput] = None,
    config: Optional[AnimationConfig] = None,
) -> AnimationPlan:
    """
    Convenience function to plan an animation.

    Args:
        elements: Drawing document, or list of elements / editor records
        narration: Optional narration segments (objects or dicts)
        config: Timing configuration (defaults when omitted)

    Returns:
        AnimationPlan with total duration and sorted descriptors
    """
    return AnimationPlanner(config).plan(elements, narration)
