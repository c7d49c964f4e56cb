"""Drawing Animator Core Package"""
from .timing import round_ms, clamp, split_duration, progress_table, to_frame
from .order_resolver import OrderResolver
from .group_collector import GroupCollector, RUN_ID_PREFIX
from .descriptor_factory import DescriptorFactory, sort_descriptors
from .timeline_allocator import TimelineAllocator
from .narration_sync import NarrationSynchronizer
from .narration_script import NarrationScriptBuilder, ScriptSegment
from .pipeline import AnimationPlanner, plan_animation

__all__ = [
    'round_ms', 'clamp', 'split_duration', 'progress_table', 'to_frame',
    'OrderResolver', 'GroupCollector', 'RUN_ID_PREFIX',
    'DescriptorFactory', 'sort_descriptors', 'TimelineAllocator',
    'NarrationSynchronizer', 'NarrationScriptBuilder', 'ScriptSegment',
    'AnimationPlanner', 'plan_animation'
]
