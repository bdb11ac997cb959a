"""
Base host interface for Completed Tasks.

The host owns the outline, its change notifications, its settings and its
command palette. This module defines the interface the plugin talks to: the
subscription side is implemented here once, the block operations are left to
each concrete host.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from ..models import Block, ChangeEvent, UserConfigs

ChangeHandler = Callable[[ChangeEvent], Awaitable[None]]
SettingsHandler = Callable[[Mapping[str, Any], Mapping[str, Any]], None]
CommandHandler = Callable[[], Awaitable[Any]]


class HostAPIError(Exception):
    """Error raised when the host rejects or fails an operation."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BaseHost(ABC):
    """
    Abstract base class for the host application binding.

    Handlers are called in registration order. Dispatch does not catch
    handler errors; the plugin installs its own boundary around its handlers.
    """

    def __init__(self):
        self._change_handlers: List[ChangeHandler] = []
        self._settings_handlers: List[SettingsHandler] = []
        self._commands: Dict[str, CommandHandler] = {}

    # Subscriptions

    def on_changed(self, handler: ChangeHandler) -> None:
        """Subscribe to batches of changed blocks."""
        self._change_handlers.append(handler)

    def on_settings_changed(self, handler: SettingsHandler) -> None:
        """Subscribe to settings changes; called with (new_settings, old_settings)."""
        self._settings_handlers.append(handler)

    def register_slash_command(self, label: str, handler: CommandHandler) -> None:
        """
        Register a user-invoked command.

        Args:
            label: Display label of the command
            handler: Coroutine function run when the user picks the command
        """
        if label in self._commands:
            logging.warning(f"Replacing already registered command: {label}")
        self._commands[label] = handler
        logging.info(f"Registered command: {label}")

    @property
    def commands(self) -> List[str]:
        return list(self._commands.keys())

    # Dispatch

    async def emit_changed(self, event: ChangeEvent) -> None:
        """Deliver a change event to every subscriber."""
        for handler in list(self._change_handlers):
            await handler(event)

    def emit_settings_changed(self, new_settings: Mapping[str, Any],
                              old_settings: Mapping[str, Any]) -> None:
        """Deliver a settings change to every subscriber."""
        for handler in list(self._settings_handlers):
            handler(new_settings, old_settings)

    async def run_command(self, label: str) -> Any:
        """
        Run a registered command as if the user had picked it.

        Raises:
            KeyError: If no command is registered under the label
        """
        if label not in self._commands:
            raise KeyError(f"Unknown command: {label}")
        return await self._commands[label]()

    # Host operations

    @abstractmethod
    async def get_user_configs(self) -> UserConfigs:
        """Get the user's host configuration (preferred date format)."""
        pass

    @abstractmethod
    async def get_current_block(self) -> Optional[Block]:
        """Get the block being edited, or None when there is none."""
        pass

    @abstractmethod
    async def get_block(self, uuid: str) -> Optional[Block]:
        """Get a block by its identifier, or None when it does not exist."""
        pass

    @abstractmethod
    async def update_block(self, uuid: str, content: str,
                           properties: Mapping[str, Any]) -> None:
        """
        Rewrite a block's content and properties.

        Raises:
            HostAPIError: If the host rejects the update
        """
        pass

    @abstractmethod
    async def insert_block(self, anchor_uuid: str, content: str,
                           before: bool = False, sibling: bool = False) -> Optional[Block]:
        """
        Insert a new block relative to an existing one.

        By default the new block becomes the last child of the anchor.
        With sibling=True it is placed after the anchor, with before=True
        before it.

        Returns:
            The inserted block, or None when the host did not insert it
        """
        pass
