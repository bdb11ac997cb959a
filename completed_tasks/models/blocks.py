"""
Block models for Completed Tasks.

This module defines the snapshots of host-owned outline data that the plugin
reads. The host remains the owner of every block; these are read-only copies
taken at the time of a change.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Block(BaseModel):
    """
    A snapshot of one outline node as delivered by the host.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    uuid: str = Field(
        ...,
        description="The unique identifier of the block"
    )

    content: str = Field(
        default="",
        description="Raw text of the block, including property lines and the logbook"
    )

    marker: Optional[str] = Field(
        default=None,
        description="Task marker of the block (e.g. 'TODO', 'DONE'), if any"
    )

    properties: Dict[str, Any] = Field(
        default_factory=dict,
        description="Structured properties tracked by the host for this block"
    )

    page: Optional[Any] = Field(
        default=None,
        description="Reference to the page that owns the block"
    )

    parent: Optional[Any] = Field(
        default=None,
        description="Reference to the parent block or page"
    )

    @field_validator("properties", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("content", mode="before")
    @classmethod
    def _content_to_text(cls, value: Any) -> Any:
        return "" if value is None else value


class ChangeEvent(BaseModel):
    """
    A batch of blocks changed together in one host transaction.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    blocks: List[Block] = Field(
        default_factory=list,
        description="Changed blocks, in the order the host reported them"
    )

    tx_meta: Optional[Dict[str, Any]] = Field(
        default=None,
        alias="txMeta",
        description="Host transaction metadata, passed through untouched"
    )


class UserConfigs(BaseModel):
    """
    The subset of the host's user configuration the plugin reads.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    preferred_date_format: str = Field(
        default="MMM do, yyyy",
        alias="preferredDateFormat",
        description="Pattern used by the host to name journal (date) pages"
    )
