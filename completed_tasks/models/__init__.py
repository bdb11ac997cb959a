"""Data models for Completed Tasks."""

from .blocks import Block, ChangeEvent, UserConfigs
from .updates import PropertyUpdate, UpdateRequest

__all__ = [
    "Block",
    "ChangeEvent",
    "UserConfigs",
    "PropertyUpdate",
    "UpdateRequest"
]
