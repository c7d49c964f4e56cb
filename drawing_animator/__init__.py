"""
Drawing Animator

Turns a static vector drawing into a timed animation plan: per-element
reveal descriptors (stroke, fill, typing, freehand progression, pointer)
with absolute timestamps, optionally re-timed against measured narration.
"""
from .config import AnimationConfig, GroupBudgetStrategy, ConfigPresets, get_preset
from .models import (
    ElementKind, DescriptorKind, DrawingElement, AnimationGroup,
    AnimationDescriptor, NarrationSegment, Timeline, AnimationPlan, load_elements
)
from .core import (
    OrderResolver, GroupCollector, DescriptorFactory, TimelineAllocator,
    NarrationSynchronizer, NarrationScriptBuilder, AnimationPlanner, plan_animation
)

__version__ = "1.0.0"

__all__ = [
    'AnimationConfig', 'GroupBudgetStrategy', 'ConfigPresets', 'get_preset',
    'ElementKind', 'DescriptorKind', 'DrawingElement', 'AnimationGroup',
    'AnimationDescriptor', 'NarrationSegment', 'Timeline', 'AnimationPlan',
    'load_elements', 'OrderResolver', 'GroupCollector', 'DescriptorFactory',
    'TimelineAllocator', 'NarrationSynchronizer', 'NarrationScriptBuilder',
    'AnimationPlanner', 'plan_animation'
]
