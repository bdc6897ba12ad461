"""Common constructor and plugin-hook relay for the service classes."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from guidectl.infrastructure.guide import Guide

logger = logging.getLogger(__name__)


class BaseService:
    """Holds the :class:`Guide` a service reads chapters and plugins from.

    Subclasses reach documents through ``self._guide``::

        class TocService(BaseService):
            def toc(self, depth: int = 3) -> ServiceResult:
                for path in self._guide.chapter_order():
                    ...
    """

    def __init__(self, guide: Guide) -> None:
        self._guide = guide

    def _dispatch_event(self, hook_name: str, payload: dict[str, Any], warnings: list[str]) -> None:
        """Call *hook_name* on all plugins; a raising plugin adds to *warnings*."""
        try:
            relay = self._guide.plugin_manager.hook
            getattr(relay, hook_name)(**payload)
        except Exception:
            logger.debug("plugin hook %s raised", hook_name, exc_info=True)
            warnings.append(f"Plugin hook failed: {hook_name}")
