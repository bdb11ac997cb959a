"""
User commands for Completed Tasks.

The "Completed tasks for the past week" command inserts, above the current
block, a heading with a query listing every task completed during the seven
days before today, followed by a separator.
"""

import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from .config import CompletionSettings
from .dates import get_date_for_page, normalize_weekday_pattern, past_week_dates
from .host import BaseHost
from .models import Block

WEEKLY_QUERY_LABEL = "Completed tasks for the past week"
WEEKLY_QUERY_HEADER = "### Tasks completed last week"
SEPARATOR = "---"


def build_weekly_query(day_labels: Iterable[str], property_name: str = "completed") -> str:
    """
    Build a query matching blocks whose completion property is any of the days.

    Args:
        day_labels: Date page links, e.g. "[[Oct 15th, 2026]]"
        property_name: Completion date property to match on

    Returns:
        The query macro text
    """
    days = [f"(property {property_name} {label})" for label in day_labels]
    return "{{query (or " + " ".join(days) + ") }}"


async def insert_weekly_query(host: BaseHost,
                              settings: Optional[CompletionSettings] = None,
                              now: Callable[[], datetime] = datetime.now) -> Optional[List[Block]]:
    """
    Insert the weekly completed-tasks query around the current block.

    The heading goes right before the current block, the query becomes its
    child and the separator follows the query. Each step needs the block
    returned by the previous one, so a missing result stops the sequence.

    Args:
        host: Host to read from and insert into
        settings: Plugin settings (for the completion property name)
        now: Clock returning the current local time

    Returns:
        The inserted [heading, query, separator] blocks, or None if aborted
    """
    settings = settings or CompletionSettings()

    block = await host.get_current_block()
    if not block:
        logging.debug("No current block; weekly query not inserted")
        return None

    user_configs = await host.get_user_configs()
    preferred_date_format = normalize_weekday_pattern(user_configs.preferred_date_format)

    labels = [get_date_for_page(day, preferred_date_format) for day in past_week_dates(now().date())]
    query = build_weekly_query(labels, settings.completed_date_property)

    header = await host.insert_block(block.uuid, WEEKLY_QUERY_HEADER, before=True)
    if not header:
        return None

    query_block = await host.insert_block(header.uuid, query)
    if not query_block:
        return None

    separator = await host.insert_block(query_block.uuid, SEPARATOR, sibling=True)
    if not separator:
        return None

    logging.info(f"Inserted weekly completed-tasks query before block {block.uuid}")
    return [header, query_block, separator]
