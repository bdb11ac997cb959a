"""
Completed Tasks: completion date and time properties for outline tasks.

Watches task blocks in the host outline and keeps a completion date (and
optionally a time) property in step with the task's marker.
"""

__version__ = "0.1.0"
__author__ = "Completed Tasks Project"

# Import main components
from .config import CompletionSettings, ConfigManager
from .models import Block, ChangeEvent, PropertyUpdate, UpdateRequest, UserConfigs
from .markers import MarkerSets, split_task_markers
from .content import get_updated_block_content
from .host import BaseHost, HostAPIError, InMemoryHost, LogseqAPIHost
from .reactor import CompletionReactor
from .commands import insert_weekly_query
from .plugin import CompletedTasksPlugin

__all__ = [
    "CompletionSettings",
    "ConfigManager",
    "Block",
    "ChangeEvent",
    "PropertyUpdate",
    "UpdateRequest",
    "UserConfigs",
    "MarkerSets",
    "split_task_markers",
    "get_updated_block_content",
    "BaseHost",
    "HostAPIError",
    "InMemoryHost",
    "LogseqAPIHost",
    "CompletionReactor",
    "insert_weekly_query",
    "CompletedTasksPlugin"
]
