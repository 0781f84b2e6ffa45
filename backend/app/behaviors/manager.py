"""
Behavior Manager

Runs the registered behavior handlers, in priority order, for the
behaviors a table model was tagged with.

Usage:
    data = behavior_manager.apply_before_save(Customer, payload, context)
    cursor.execute(build_insert(data))

Errors raised by a handler propagate to the caller so the write never
happens with half-applied behaviors.
"""
import logging
from typing import Any, Dict, List, Optional

from app.behaviors.context import BehaviorContext
from app.behaviors.decorators import get_behaviors
from app.behaviors.handlers import BehaviorHandler, default_handlers

logger = logging.getLogger(__name__)


class BehaviorManager:

    def __init__(self, handlers: Optional[List[BehaviorHandler]] = None):
        self._handlers: List[BehaviorHandler] = []
        for handler in handlers if handlers is not None else default_handlers():
            self.register(handler)

    def register(self, handler: BehaviorHandler):
        """Add a handler, replacing any handler with the same name"""
        self._handlers = [h for h in self._handlers if h.name != handler.name]
        self._handlers.append(handler)
        self._handlers.sort(key=lambda h: h.priority)

    @property
    def handlers(self) -> List[BehaviorHandler]:
        return list(self._handlers)

    def apply_before_save(self, entity_cls, data: Dict[str, Any], context: BehaviorContext) -> Dict[str, Any]:
        return self._run("before_save", entity_cls, data, context)

    def apply_before_delete(self, entity_cls, data: Dict[str, Any], context: BehaviorContext) -> Dict[str, Any]:
        return self._run("before_delete", entity_cls, data, context)

    def apply_before_restore(self, entity_cls, data: Dict[str, Any], context: BehaviorContext) -> Dict[str, Any]:
        return self._run("before_restore", entity_cls, data, context)

    def _run(self, hook: str, entity_cls, data: Dict[str, Any], context: BehaviorContext) -> Dict[str, Any]:
        behaviors = get_behaviors(entity_cls)
        result = dict(data)

        for handler in self._handlers:
            config = behaviors.get(handler.name)
            if config is None:
                continue
            logger.debug(f"Applying {handler.name}.{hook} to {context.entity_type} ({context.operation.value})")
            getattr(handler, hook)(result, config, context)

        return result


behavior_manager = BehaviorManager()
