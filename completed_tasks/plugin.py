"""
Plugin wiring for Completed Tasks.

Connects the reactor and the weekly-query command to a host: change events go
to the reactor, settings changes rebuild the reactor's settings and markers,
and the command is registered under its display label.

Handler errors stop at this layer. They are logged and the event or command
is dropped; nothing is retried.
"""

import logging
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional

from .commands import WEEKLY_QUERY_LABEL, insert_weekly_query
from .config import CompletionSettings
from .host import BaseHost
from .models import Block, ChangeEvent, UpdateRequest
from .reactor import CompletionReactor


class CompletedTasksPlugin:
    """
    The plugin as seen by the host.
    """

    def __init__(self, host: BaseHost, settings: Optional[Mapping[str, Any]] = None,
                 now: Callable[[], datetime] = datetime.now):
        """
        Initialize the plugin.

        Args:
            host: The host to attach to
            settings: Plugin settings keyed by host setting keys
            now: Clock returning the current local time
        """
        self.host = host
        self.now = now
        self.reactor = CompletionReactor(host, settings, now=now)
        self._ready = False

    @property
    def settings(self) -> CompletionSettings:
        return self.reactor.settings

    def ready(self) -> None:
        """Subscribe to the host and register the command."""
        if self._ready:
            return

        self.host.on_changed(self.on_changed)
        self.host.on_settings_changed(self.on_settings_changed)
        self.host.register_slash_command(WEEKLY_QUERY_LABEL, self.weekly_query_command)
        self._ready = True

        logging.info("Completed tasks plugin ready")

    async def on_changed(self, event: ChangeEvent) -> Optional[UpdateRequest]:
        try:
            return await self.reactor.handle(event)
        except Exception as e:
            logging.error(f"Failed to update completed task: {e}", exc_info=True)
            return None

    def on_settings_changed(self, new_settings: Mapping[str, Any],
                            old_settings: Optional[Mapping[str, Any]] = None) -> None:
        self.reactor.apply_settings(new_settings)

    async def weekly_query_command(self) -> Optional[List[Block]]:
        try:
            return await insert_weekly_query(self.host, self.settings, now=self.now)
        except Exception as e:
            logging.error(f"Failed to insert weekly completed tasks query: {e}", exc_info=True)
            return None
