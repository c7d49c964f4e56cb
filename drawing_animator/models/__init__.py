"""Drawing Animator Models Package"""
from .data_models import (
    ElementKind, DescriptorKind, DrawingElement, AnimationGroup,
    AnimationDescriptor, NarrationSegment, ElementSlot, SegmentPlacement,
    Timeline, AnimationPlan, load_elements, NO_FILL
)

__all__ = [
    'ElementKind', 'DescriptorKind', 'DrawingElement', 'AnimationGroup',
    'AnimationDescriptor', 'NarrationSegment', 'ElementSlot', 'SegmentPlacement',
    'Timeline', 'AnimationPlan', 'load_elements', 'NO_FILL'
]
