"""
Behavior handlers

Each handler fills in the columns its behavior owns on the dict a
repository is about to write. Hooks mutate `data` in place.

Priorities (lower runs first):
    timestampable   10
    blameable       20
    soft_deletable  30
    versionable     40
"""
import logging
from typing import Any, Dict

from app.behaviors.context import BehaviorContext, Operation
from app.behaviors.decorators import (
    TIMESTAMPABLE, BLAMEABLE, SOFT_DELETABLE, VERSIONABLE,
    TimestampableConfig, BlameableConfig, SoftDeletableConfig, VersionableConfig,
)
from app.domain.exceptions import DomainError, ConflictError

logger = logging.getLogger(__name__)


class BehaviorHandler:
    """Base handler: every hook is a no-op unless overridden"""

    name: str = ""
    priority: int = 100

    def before_save(self, data: Dict[str, Any], config: Any, context: BehaviorContext):
        pass

    def before_delete(self, data: Dict[str, Any], config: Any, context: BehaviorContext):
        pass

    def before_restore(self, data: Dict[str, Any], config: Any, context: BehaviorContext):
        pass


class TimestampableHandler(BehaviorHandler):
    name = TIMESTAMPABLE
    priority = 10

    def before_save(self, data, config: TimestampableConfig, context):
        if context.operation == Operation.CREATE:
            data.setdefault(config.created_at_field, context.now)
        data[config.updated_at_field] = context.now

    def before_delete(self, data, config: TimestampableConfig, context):
        data[config.updated_at_field] = context.now

    def before_restore(self, data, config: TimestampableConfig, context):
        data[config.updated_at_field] = context.now


class BlameableHandler(BehaviorHandler):
    name = BLAMEABLE
    priority = 20

    def _user(self, config: BlameableConfig, context: BehaviorContext):
        if context.user_id is None and config.require_user:
            raise DomainError(f"A user is required to {context.operation.value} {context.entity_type}")
        return context.user_id

    def before_save(self, data, config: BlameableConfig, context):
        user_id = self._user(config, context)
        if user_id is None:
            return
        if context.operation == Operation.CREATE and data.get(config.created_by_field) is None:
            data[config.created_by_field] = user_id
        data[config.updated_by_field] = user_id

    def before_delete(self, data, config: BlameableConfig, context):
        user_id = self._user(config, context)
        if user_id is not None:
            data[config.updated_by_field] = user_id

    def before_restore(self, data, config: BlameableConfig, context):
        self.before_delete(data, config, context)


class SoftDeletableHandler(BehaviorHandler):
    name = SOFT_DELETABLE
    priority = 30

    def before_delete(self, data, config: SoftDeletableConfig, context):
        data[config.deleted_at_field] = context.now
        if config.deleted_by_field and context.user_id is not None:
            data[config.deleted_by_field] = context.user_id

    def before_restore(self, data, config: SoftDeletableConfig, context):
        if not config.allow_restore:
            raise DomainError(f"{context.entity_type} records cannot be restored")
        if context.original is not None and not is_deleted(context.original, config):
            raise DomainError(f"{context.entity_type} is not deleted")
        data[config.deleted_at_field] = None
        if config.deleted_by_field:
            data[config.deleted_by_field] = None


class VersionableHandler(BehaviorHandler):
    name = VERSIONABLE
    priority = 40

    def before_save(self, data, config: VersionableConfig, context):
        if context.operation == Operation.CREATE:
            data[config.version_field] = config.initial_version
            return

        current = None
        if context.original is not None:
            current = context.original.get(config.version_field)
        check_version(context.expected_version, current, context.entity_type)
        data[config.version_field] = (current or config.initial_version) + 1


def is_deleted(row: Dict[str, Any], config: SoftDeletableConfig = None) -> bool:
    field = config.deleted_at_field if config else "deleted_at"
    return row.get(field) is not None


def check_version(expected, current, entity_type: str = "record"):
    """
    Optimistic lock check. A caller that sends no expected version opts out.
    """
    if expected is None or current is None:
        return
    if int(expected) != int(current):
        logger.info(f"Version conflict on {entity_type}: expected {expected}, found {current}")
        raise ConflictError(
            f"{entity_type} was modified by someone else (expected version {expected}, current {current})"
        )


def default_handlers():
    return [
        TimestampableHandler(),
        BlameableHandler(),
        SoftDeletableHandler(),
        VersionableHandler(),
    ]
