"""
Behaviors - cross-cutting row concerns

Timestamps, authorship, soft deletion and version counters declared on the
table models and applied by the repositories on every write.
"""
from app.behaviors.context import BehaviorContext, Operation
from app.behaviors.decorators import (
    timestampable, blameable, soft_deletable, versionable,
    get_behavior_config, has_behavior,
)
from app.behaviors.manager import BehaviorManager, behavior_manager

__all__ = [
    'BehaviorContext',
    'Operation',
    'timestampable',
    'blameable',
    'soft_deletable',
    'versionable',
    'get_behavior_config',
    'has_behavior',
    'BehaviorManager',
    'behavior_manager',
]
