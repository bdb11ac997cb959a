"""Update requests issued to the host."""

from typing import Any, Dict, List, Tuple
from pydantic import BaseModel, Field


class PropertyUpdate(BaseModel):
    """
    Properties to add to, or remove from, a block's text.
    """

    add: List[Tuple[str, Any]] = Field(
        default_factory=list,
        description="(key, value) pairs to append as 'key:: value' lines"
    )

    remove: List[str] = Field(
        default_factory=list,
        description="Property keys whose lines should be dropped"
    )


class UpdateRequest(BaseModel):
    """
    One block rewrite: new text content together with the property map to persist.
    """

    uuid: str = Field(
        ...,
        description="The block to update"
    )

    content: str = Field(
        ...,
        description="Revised text content of the block"
    )

    properties: Dict[str, Any] = Field(
        default_factory=dict,
        description="Revised property map of the block"
    )
