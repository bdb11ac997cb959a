"""
Change reactor for Completed Tasks.

Reacts to batches of changed blocks. The first block in a batch carrying a
tracked task marker gets its completion properties reconciled: when its marker
is a 'complete' marker the date and time properties are added if missing,
otherwise any completion properties it carries are removed.

Only the first tracked block of a batch is handled.

Properties are written with a full content rewrite (update_block) rather than
per-property upserts, which leave live query results stale in the host.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional, Union

from .config import CompletionSettings
from .content import get_updated_block_content
from .dates import format_time, get_date_for_page, normalize_weekday_pattern
from .host import BaseHost
from .markers import MarkerSets
from .models import Block, ChangeEvent, PropertyUpdate, UpdateRequest


@dataclass(frozen=True)
class ReactorState:
    """
    Settings snapshot together with the marker sets parsed from it.

    Replaced as a whole, so a handler never sees settings and markers from
    two different configurations.
    """
    settings: CompletionSettings
    markers: MarkerSets

    @classmethod
    def from_settings(cls, settings: Union[CompletionSettings, Mapping[str, Any], None]) -> "ReactorState":
        if not isinstance(settings, CompletionSettings):
            settings = CompletionSettings.from_mapping(settings)
        return cls(
            settings=settings,
            markers=MarkerSets.from_strings(settings.task_markers, settings.task_markers_complete)
        )


class CompletionReactor:
    """
    Applies the completion-property policy to changed task blocks.
    """

    def __init__(self, host: BaseHost,
                 settings: Union[CompletionSettings, Mapping[str, Any], None] = None,
                 now: Callable[[], datetime] = datetime.now):
        """
        Initialize the reactor.

        Args:
            host: Host used to read user configs and update blocks
            settings: Initial plugin settings (defaults when omitted)
            now: Clock returning the current local time
        """
        self.host = host
        self.now = now
        self.state = ReactorState.from_settings(settings)

    @property
    def settings(self) -> CompletionSettings:
        return self.state.settings

    @property
    def markers(self) -> MarkerSets:
        return self.state.markers

    def apply_settings(self, settings: Union[CompletionSettings, Mapping[str, Any], None]) -> None:
        """Replace settings and marker sets after a settings change."""
        self.state = ReactorState.from_settings(settings)
        logging.info(
            f"Tracking markers {sorted(self.state.markers.tracked)}, "
            f"complete markers {sorted(self.state.markers.complete)}"
        )

    def find_task_block(self, event: ChangeEvent,
                        state: Optional[ReactorState] = None) -> Optional[Block]:
        """Get the first block of the event with a tracked marker."""
        markers = (state or self.state).markers
        for block in event.blocks:
            if markers.is_tracked(block.marker):
                return block
        return None

    def _needs_date(self, block: Block, state: ReactorState) -> bool:
        settings = state.settings
        return (
            state.markers.is_complete(block.marker)
            and settings.include_date
            and not block.properties.get(settings.completed_date_property)
        )

    def plan_update(self, block: Block, preferred_date_format: Optional[str] = None,
                    state: Optional[ReactorState] = None) -> Optional[UpdateRequest]:
        """
        Decide how a task block should be updated.

        Args:
            block: The changed task block
            preferred_date_format: Host date format; required when a date is added
            state: Settings and markers to decide with (current ones by default)

        Returns:
            The update to issue, or None when the block is already consistent
        """
        state = state or self.state
        settings = state.settings
        properties = block.properties
        date_key = settings.completed_date_property
        time_key = settings.completed_time_property
        has_date = bool(properties.get(date_key))
        has_time = bool(properties.get(time_key))

        if state.markers.is_complete(block.marker):
            additions: Dict[str, Any] = {}
            now = self.now()

            if not has_date and settings.include_date:
                if preferred_date_format is None:
                    raise ValueError("preferred_date_format is required to add a completion date")
                date_format = normalize_weekday_pattern(preferred_date_format)
                additions[date_key] = get_date_for_page(now, date_format)

            if not has_time and settings.include_time:
                additions[time_key] = format_time(now, settings.time_format)

            if not additions:
                return None

            update = PropertyUpdate(add=list(additions.items()))
            new_properties = {**properties, **additions}

        elif has_date or has_time:
            to_remove = []
            if has_date:
                to_remove.append(date_key)
            if has_time:
                to_remove.append(time_key)

            update = PropertyUpdate(remove=to_remove)
            new_properties = {key: value for key, value in properties.items() if key not in to_remove}

        else:
            return None

        content = get_updated_block_content(block.content, properties, update)

        if new_properties == properties and content == block.content:
            return None

        return UpdateRequest(uuid=block.uuid, content=content, properties=new_properties)

    async def handle(self, event: ChangeEvent) -> Optional[UpdateRequest]:
        """
        React to one batch of changed blocks.

        Host errors are not caught here.

        Returns:
            The update that was issued, or None when nothing was changed
        """
        state = self.state
        block = self.find_task_block(event, state)
        if block is None:
            return None

        preferred_date_format = None
        if self._needs_date(block, state):
            user_configs = await self.host.get_user_configs()
            preferred_date_format = user_configs.preferred_date_format

        request = self.plan_update(block, preferred_date_format, state)
        if request is None:
            logging.debug(f"Task block {block.uuid} ({block.marker}) needs no update")
            return None

        await self.host.update_block(request.uuid, request.content, request.properties)
        logging.info(f"Updated completion properties of task block {block.uuid} ({block.marker})")
        return request
