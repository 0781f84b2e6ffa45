"""
Unit tests for the behavior layer (decorators, handlers, manager)

Author: TM3
Date: 2025-10-17
"""
import pytest
from datetime import datetime, timezone

from app.behaviors import (
    BehaviorContext, BehaviorManager, Operation,
    timestampable, blameable, soft_deletable, versionable,
    get_behavior_config, has_behavior,
)
from app.behaviors.handlers import BehaviorHandler, check_version, is_deleted
from app.domain.exceptions import ConflictError, DomainError
from app.models import Customer, Brand, Comment

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@timestampable()
@blameable()
@soft_deletable()
@versionable()
class Tracked:
    pass


def ctx(operation, user_id=5, original=None, expected_version=None):
    return BehaviorContext(
        operation=operation,
        entity_type="Tracked",
        user_id=user_id,
        original=original,
        expected_version=expected_version,
        now=NOW,
    )


class TestDecorators:

    def test_tags_are_attached(self):
        assert has_behavior(Tracked, "timestampable")
        assert has_behavior(Tracked, "versionable")
        assert get_behavior_config(Tracked, "soft_deletable").deleted_by_field == "deleted_by"

    def test_subclass_tags_do_not_leak_to_parent(self):
        @blameable(require_user=True)
        class Child(Tracked):
            pass

        assert get_behavior_config(Child, "blameable").require_user is True
        assert get_behavior_config(Tracked, "blameable").require_user is False

    def test_table_models_are_tagged(self):
        assert has_behavior(Customer, "versionable")
        assert has_behavior(Brand, "timestampable")
        assert not has_behavior(Brand, "soft_deletable")
        assert get_behavior_config(Comment, "soft_deletable").allow_restore is False


class TestBehaviorManager:

    def test_create_fills_audit_columns(self):
        manager = BehaviorManager()
        data = manager.apply_before_save(Tracked, {'name': 'x'}, ctx(Operation.CREATE))

        assert data == {
            'name': 'x',
            'created_at': NOW,
            'updated_at': NOW,
            'created_by': 5,
            'updated_by': 5,
            'version': 1,
        }

    def test_input_dict_is_not_mutated(self):
        payload = {'name': 'x'}
        BehaviorManager().apply_before_save(Tracked, payload, ctx(Operation.CREATE))
        assert payload == {'name': 'x'}

    def test_update_bumps_version_and_keeps_creator(self):
        original = {'id': 1, 'version': 4, 'created_by': 2}
        data = BehaviorManager().apply_before_save(Tracked, {'name': 'y'}, ctx(Operation.UPDATE, original=original))

        assert data['version'] == 5
        assert data['updated_by'] == 5
        assert data['updated_at'] == NOW
        assert 'created_by' not in data
        assert 'created_at' not in data

    def test_update_with_stale_version_conflicts(self):
        original = {'id': 1, 'version': 4}
        with pytest.raises(ConflictError, match="expected version 3, current 4"):
            BehaviorManager().apply_before_save(
                Tracked, {'name': 'y'}, ctx(Operation.UPDATE, original=original, expected_version=3)
            )

    def test_delete_marks_row(self):
        data = BehaviorManager().apply_before_delete(Tracked, {}, ctx(Operation.DELETE, original={'id': 1}))
        assert data['deleted_at'] == NOW
        assert data['deleted_by'] == 5
        assert data['updated_at'] == NOW

    def test_restore_clears_deletion(self):
        original = {'id': 1, 'deleted_at': NOW, 'deleted_by': 5}
        data = BehaviorManager().apply_before_restore(Tracked, {}, ctx(Operation.RESTORE, original=original))
        assert data['deleted_at'] is None
        assert data['deleted_by'] is None

    def test_restore_of_live_row_is_rejected(self):
        with pytest.raises(DomainError, match="not deleted"):
            BehaviorManager().apply_before_restore(
                Tracked, {}, ctx(Operation.RESTORE, original={'id': 1, 'deleted_at': None})
            )

    def test_restore_disallowed_by_config(self):
        original = {'id': 1, 'deleted_at': NOW}
        with pytest.raises(DomainError, match="cannot be restored"):
            BehaviorManager().apply_before_restore(Comment, {}, ctx(Operation.RESTORE, original=original))

    def test_blameable_can_require_user(self):
        @blameable(require_user=True)
        class Strict:
            pass

        with pytest.raises(DomainError):
            BehaviorManager().apply_before_save(Strict, {}, ctx(Operation.CREATE, user_id=None))

    def test_untagged_class_is_untouched(self):
        class Plain:
            pass

        assert BehaviorManager().apply_before_save(Plain, {'a': 1}, ctx(Operation.CREATE)) == {'a': 1}

    def test_handlers_run_in_priority_order(self):
        calls = []

        class Recorder(BehaviorHandler):
            def __init__(self, name, priority):
                self.name = name
                self.priority = priority

            def before_save(self, data, config, context):
                calls.append(self.name)

        manager = BehaviorManager(handlers=[Recorder("versionable", 40), Recorder("timestampable", 10)])
        manager.apply_before_save(Tracked, {}, ctx(Operation.CREATE))

        assert calls == ["timestampable", "versionable"]

    def test_register_replaces_same_name(self):
        manager = BehaviorManager()
        count = len(manager.handlers)

        class Replacement(BehaviorHandler):
            name = "blameable"
            priority = 20

        manager.register(Replacement())
        assert len(manager.handlers) == count
        assert any(isinstance(h, Replacement) for h in manager.handlers)


class TestHandlerHelpers:

    def test_check_version_skips_when_not_sent(self):
        check_version(None, 3)
        check_version(3, None)

    def test_check_version_match(self):
        check_version(3, 3)
        check_version("3", 3)

    def test_is_deleted(self):
        assert is_deleted({'deleted_at': NOW})
        assert not is_deleted({'deleted_at': None})
