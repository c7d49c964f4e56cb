"""Drawing Animator Config Package"""
from .settings import (
    AnimationConfig, GroupBudgetStrategy, ConfigPresets,
    get_preset, PRESETS
)

__all__ = [
    'AnimationConfig', 'GroupBudgetStrategy', 'ConfigPresets',
    'get_preset', 'PRESETS'
]
