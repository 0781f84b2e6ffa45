"""
Behavior decorators

Class decorators that tag a table model with the cross-cutting concerns
its rows carry. The tags are plain config objects; BehaviorManager reads
them when a repository writes a row.

Usage:
    @timestampable()
    @blameable()
    @soft_deletable(allow_restore=True)
    @versionable()
    class Customer(Base):
        ...
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

BEHAVIORS_ATTR = "__behaviors__"

TIMESTAMPABLE = "timestampable"
BLAMEABLE = "blameable"
SOFT_DELETABLE = "soft_deletable"
VERSIONABLE = "versionable"


@dataclass(frozen=True)
class TimestampableConfig:
    created_at_field: str = "created_at"
    updated_at_field: str = "updated_at"


@dataclass(frozen=True)
class BlameableConfig:
    created_by_field: str = "created_by"
    updated_by_field: str = "updated_by"
    # When set, writes without a user in the context are rejected
    require_user: bool = False


@dataclass(frozen=True)
class SoftDeletableConfig:
    deleted_at_field: str = "deleted_at"
    deleted_by_field: Optional[str] = "deleted_by"
    allow_restore: bool = True


@dataclass(frozen=True)
class VersionableConfig:
    version_field: str = "version"
    initial_version: int = 1


def _attach(name: str, config: Any):
    def decorator(cls):
        # Copy so subclasses don't write into the parent's mapping
        behaviors = dict(getattr(cls, BEHAVIORS_ATTR, {}))
        behaviors[name] = config
        setattr(cls, BEHAVIORS_ATTR, behaviors)
        return cls
    return decorator


def timestampable(**options):
    return _attach(TIMESTAMPABLE, TimestampableConfig(**options))


def blameable(**options):
    return _attach(BLAMEABLE, BlameableConfig(**options))


def soft_deletable(**options):
    return _attach(SOFT_DELETABLE, SoftDeletableConfig(**options))


def versionable(**options):
    return _attach(VERSIONABLE, VersionableConfig(**options))


def get_behaviors(cls) -> Dict[str, Any]:
    return dict(getattr(cls, BEHAVIORS_ATTR, {}))


def get_behavior_config(cls, name: str) -> Optional[Any]:
    return getattr(cls, BEHAVIORS_ATTR, {}).get(name)


def has_behavior(cls, name: str) -> bool:
    return name in getattr(cls, BEHAVIORS_ATTR, {})
