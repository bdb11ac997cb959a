"""
In-memory host for Completed Tasks.

This module provides a dictionary-backed outline that behaves like the host
for the operations the plugin uses. It is used by the tests and for trying
the plugin without a running host application.
"""

import logging
import uuid as uuid_lib
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..models import Block, ChangeEvent, UpdateRequest, UserConfigs
from .base import BaseHost, HostAPIError


class InMemoryHost(BaseHost):
    """
    Host keeping a single page of blocks in memory.

    Every update and insert is recorded so callers can inspect what the
    plugin asked for.
    """

    def __init__(self, preferred_date_format: str = "MMM do, yyyy"):
        """
        Initialize the in-memory host.

        Args:
            preferred_date_format: Date format reported by get_user_configs()
        """
        super().__init__()
        self.user_configs = UserConfigs(preferred_date_format=preferred_date_format)
        self.blocks: Dict[str, Block] = {}
        self.parents: Dict[str, Optional[str]] = {}
        self.children: Dict[Optional[str], List[str]] = {None: []}
        self.current_block_uuid: Optional[str] = None

        self.updates: List[UpdateRequest] = []
        self.inserts: List[Tuple[str, str, bool, bool]] = []
        self.user_config_requests = 0

        # Set to an exception instance to make the matching operation fail
        self.fail_updates: Optional[Exception] = None
        self.fail_inserts: Optional[Exception] = None
        self.refuse_inserts = False

    def add_block(self, content: str = "", marker: Optional[str] = None,
                  properties: Optional[Mapping[str, Any]] = None,
                  parent_uuid: Optional[str] = None,
                  block_uuid: Optional[str] = None) -> Block:
        """
        Add a block at the end of the page, or as the last child of a parent.

        Returns:
            The stored block
        """
        block = Block(
            uuid=block_uuid or str(uuid_lib.uuid4()),
            content=content,
            marker=marker,
            properties=dict(properties or {}),
            parent=parent_uuid
        )
        self._attach(block, parent_uuid, len(self.children.get(parent_uuid, [])))
        return block

    def set_marker(self, block_uuid: str, marker: Optional[str]) -> Block:
        """Change a block's marker, as the user would by toggling the task."""
        block = self.blocks[block_uuid]
        first_line, _, rest = block.content.partition("\n")
        words = first_line.split(" ", 1)
        if block.marker and words and words[0] == block.marker:
            words = words[1:]
        title = " ".join(words)
        first_line = f"{marker} {title}" if marker else title
        content = first_line + ("\n" + rest if rest else "")

        updated = block.model_copy(update={"marker": marker, "content": content})
        self.blocks[block_uuid] = updated
        return updated

    async def change_marker(self, block_uuid: str, marker: Optional[str]) -> Block:
        """Change a block's marker and deliver the resulting change event."""
        block = self.set_marker(block_uuid, marker)
        await self.emit_changed(ChangeEvent(blocks=[block]))
        return self.blocks[block_uuid]

    def child_uuids(self, parent_uuid: Optional[str] = None) -> List[str]:
        return list(self.children.get(parent_uuid, []))

    def _attach(self, block: Block, parent_uuid: Optional[str], index: int) -> None:
        self.blocks[block.uuid] = block
        self.parents[block.uuid] = parent_uuid
        self.children.setdefault(parent_uuid, []).insert(index, block.uuid)
        self.children.setdefault(block.uuid, [])

    async def get_user_configs(self) -> UserConfigs:
        self.user_config_requests += 1
        return self.user_configs

    async def get_current_block(self) -> Optional[Block]:
        if self.current_block_uuid is None:
            return None
        return self.blocks.get(self.current_block_uuid)

    async def get_block(self, uuid: str) -> Optional[Block]:
        return self.blocks.get(uuid)

    async def update_block(self, uuid: str, content: str,
                           properties: Mapping[str, Any]) -> None:
        if self.fail_updates is not None:
            raise self.fail_updates
        if uuid not in self.blocks:
            raise HostAPIError(f"Block not found: {uuid}")

        self.updates.append(UpdateRequest(uuid=uuid, content=content, properties=dict(properties)))
        self.blocks[uuid] = self.blocks[uuid].model_copy(
            update={"content": content, "properties": dict(properties)}
        )
        logging.debug(f"Updated block {uuid}")

    async def insert_block(self, anchor_uuid: str, content: str,
                           before: bool = False, sibling: bool = False) -> Optional[Block]:
        if self.fail_inserts is not None:
            raise self.fail_inserts
        if anchor_uuid not in self.blocks:
            raise HostAPIError(f"Block not found: {anchor_uuid}")

        self.inserts.append((anchor_uuid, content, before, sibling))
        if self.refuse_inserts:
            return None

        if before or sibling:
            parent_uuid = self.parents[anchor_uuid]
            index = self.children[parent_uuid].index(anchor_uuid) + (0 if before else 1)
        else:
            parent_uuid = anchor_uuid
            index = len(self.children[anchor_uuid])

        block = Block(uuid=str(uuid_lib.uuid4()), content=content, parent=parent_uuid)
        self._attach(block, parent_uuid, index)
        return block
