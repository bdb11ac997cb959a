"""
Tests for the change reactor.

Covers the completion-property policy end to end against the in-memory host.
"""

import unittest
from datetime import datetime

from completed_tasks.host import HostAPIError, InMemoryHost
from completed_tasks.models import Block, ChangeEvent
from completed_tasks.reactor import CompletionReactor

NOW = datetime(2026, 10, 16, 9, 5)
TODAY_LINK = "[[Oct 16th, 2026]]"


def fixed_clock():
    return NOW


class TestCompletionReactor(unittest.IsolatedAsyncioTestCase):
    """Test reacting to changed task blocks."""

    def setUp(self):
        """Set up a host and a reactor with default settings."""
        self.host = InMemoryHost()
        self.reactor = CompletionReactor(self.host, now=fixed_clock)

    async def test_completed_task_gets_date(self):
        """Test a DONE task without a completion date gets one."""
        block = self.host.add_block("DONE Buy milk", marker="DONE")

        request = await self.reactor.handle(ChangeEvent(blocks=[block]))

        self.assertIsNotNone(request)
        self.assertEqual(len(self.host.updates), 1)
        update = self.host.updates[0]
        self.assertEqual(update.uuid, block.uuid)
        self.assertEqual(update.properties, {"completed": TODAY_LINK})
        self.assertEqual(update.content, f"DONE Buy milk\ncompleted:: {TODAY_LINK}")

    async def test_untracked_marker_is_ignored(self):
        """Test blocks without a tracked marker cause no update."""
        someday = self.host.add_block("SOMEDAY Learn piano", marker="SOMEDAY")
        plain = self.host.add_block("Just a note", properties={"completed": "x"})

        request = await self.reactor.handle(ChangeEvent(blocks=[someday, plain]))

        self.assertIsNone(request)
        self.assertEqual(self.host.updates, [])

    async def test_empty_event(self):
        """Test an event without blocks does nothing."""
        self.assertIsNone(await self.reactor.handle(ChangeEvent()))
        self.assertEqual(self.host.updates, [])

    async def test_redelivery_is_idempotent(self):
        """Test a completed task that already has its properties is left alone."""
        block = self.host.add_block("DONE Buy milk", marker="DONE")

        await self.reactor.handle(ChangeEvent(blocks=[block]))
        updated = self.host.blocks[block.uuid]
        second = await self.reactor.handle(ChangeEvent(blocks=[updated]))

        self.assertIsNone(second)
        self.assertEqual(len(self.host.updates), 1)

    async def test_existing_date_not_overwritten(self):
        """Test an existing completion date is kept and user configs are not fetched."""
        block = self.host.add_block(
            "DONE Buy milk\ncompleted:: [[Oct 1st, 2026]]", marker="DONE",
            properties={"completed": "[[Oct 1st, 2026]]"}
        )

        request = await self.reactor.handle(ChangeEvent(blocks=[block]))

        self.assertIsNone(request)
        self.assertEqual(self.host.user_config_requests, 0)

    async def test_reopened_task_loses_date(self):
        """Test a task moved back to TODO loses its completion property and line."""
        block = self.host.add_block(
            "TODO Buy milk\ncompleted:: 2024-01-01\npriority:: high", marker="TODO",
            properties={"completed": "2024-01-01", "priority": "high"}
        )

        await self.reactor.handle(ChangeEvent(blocks=[block]))

        self.assertEqual(len(self.host.updates), 1)
        update = self.host.updates[0]
        self.assertEqual(update.properties, {"priority": "high"})
        self.assertEqual(update.content, "TODO Buy milk\npriority:: high")

    async def test_reopened_task_loses_date_and_time(self):
        """Test both completion properties are removed together."""
        block = self.host.add_block(
            "LATER Call Bob\ncompleted:: [[Oct 1st, 2026]]\ntime:: 10:00", marker="LATER",
            properties={"completed": "[[Oct 1st, 2026]]", "time": "10:00"}
        )

        await self.reactor.handle(ChangeEvent(blocks=[block]))

        update = self.host.updates[0]
        self.assertEqual(update.properties, {})
        self.assertEqual(update.content, "LATER Call Bob")

    async def test_open_task_without_properties(self):
        """Test an open task without completion properties needs no update."""
        block = self.host.add_block("TODO Buy milk", marker="TODO")

        self.assertIsNone(await self.reactor.handle(ChangeEvent(blocks=[block])))
        self.assertEqual(self.host.updates, [])

    async def test_time_is_added_when_enabled(self):
        """Test the completion time is added after the date when enabled."""
        self.reactor.apply_settings({"includeTime": True})
        block = self.host.add_block("DONE Buy milk", marker="DONE")

        await self.reactor.handle(ChangeEvent(blocks=[block]))

        update = self.host.updates[0]
        self.assertEqual(update.properties, {"completed": TODAY_LINK, "time": "09:05"})
        self.assertEqual(update.content, f"DONE Buy milk\ncompleted:: {TODAY_LINK}\ntime:: 09:05")

    async def test_only_time_missing(self):
        """Test only the missing time is added when the date exists."""
        self.reactor.apply_settings({"includeTime": True, "timeFormat": "h:mm A"})
        block = self.host.add_block(
            "DONE Buy milk\ncompleted:: [[Oct 1st, 2026]]", marker="DONE",
            properties={"completed": "[[Oct 1st, 2026]]"}
        )

        await self.reactor.handle(ChangeEvent(blocks=[block]))

        update = self.host.updates[0]
        self.assertEqual(update.properties, {"completed": "[[Oct 1st, 2026]]", "time": "9:05 AM"})
        self.assertEqual(update.content, "DONE Buy milk\ncompleted:: [[Oct 1st, 2026]]\ntime:: 9:05 AM")
        self.assertEqual(self.host.user_config_requests, 0)

    async def test_empty_time_format_stays_complete(self):
        """Test an empty time format still writes a non-empty time, so redelivery is a no-op."""
        self.reactor.apply_settings({"includeTime": True, "timeFormat": ""})
        block = self.host.add_block("DONE Buy milk", marker="DONE")

        await self.reactor.handle(ChangeEvent(blocks=[block]))
        time_value = self.host.updates[0].properties["time"]
        second = await self.reactor.handle(ChangeEvent(blocks=[self.host.blocks[block.uuid]]))

        self.assertTrue(time_value.startswith("2026-10-16T09:05:00"))
        self.assertIsNone(second)
        self.assertEqual(len(self.host.updates), 1)

    async def test_nothing_enabled(self):
        """Test no update is issued when both options are disabled."""
        self.reactor.apply_settings({"includeDate": False, "includeTime": False})
        block = self.host.add_block("DONE Buy milk", marker="DONE")

        self.assertIsNone(await self.reactor.handle(ChangeEvent(blocks=[block])))
        self.assertEqual(self.host.updates, [])

    async def test_only_first_tracked_block_is_handled(self):
        """Test only the first tracked block of a batch is updated."""
        note = self.host.add_block("A note")
        first = self.host.add_block("DONE First", marker="DONE")
        second = self.host.add_block("DONE Second", marker="DONE")

        await self.reactor.handle(ChangeEvent(blocks=[note, first, second]))

        self.assertEqual([update.uuid for update in self.host.updates], [first.uuid])

    async def test_custom_property_names(self):
        """Test configured property names are used."""
        self.reactor.apply_settings({
            "completedDateProperty": "done-on",
            "completedTimeProperty": "done-at",
            "includeTime": True
        })
        block = self.host.add_block("CANCELLED Trip", marker="CANCELLED")

        await self.reactor.handle(ChangeEvent(blocks=[block]))

        self.assertEqual(self.host.updates[0].properties, {"done-on": TODAY_LINK, "done-at": "09:05"})

    async def test_weekday_format_is_normalized(self):
        """Test one or two E characters render as the abbreviated weekday."""
        self.host.user_configs = self.host.user_configs.model_copy(
            update={"preferred_date_format": "E, MM/dd/yyyy"}
        )
        block = self.host.add_block("DONE Buy milk", marker="DONE")

        await self.reactor.handle(ChangeEvent(blocks=[block]))

        self.assertEqual(self.host.updates[0].properties, {"completed": "[[Fri, 10/16/2026]]"})

    async def test_logbook_removed_from_content(self):
        """Test logbook lines are not written back into the content."""
        block = self.host.add_block(
            "DONE Write report\n:LOGBOOK:\nCLOCK: [2026-10-16 Fri 09:00:00]--[2026-10-16 Fri 09:05:00] =>  00:05:00\n:END:",
            marker="DONE"
        )

        await self.reactor.handle(ChangeEvent(blocks=[block]))

        self.assertEqual(self.host.updates[0].content, f"DONE Write report\ncompleted:: {TODAY_LINK}")

    async def test_settings_change_replaces_markers(self):
        """Test marker sets are rebuilt from new settings."""
        self.reactor.apply_settings({"taskMarkers": "DONE", "taskMarkersComplete": "DONE"})
        block = self.host.add_block(
            "TODO Buy milk\ncompleted:: 2024-01-01", marker="TODO",
            properties={"completed": "2024-01-01"}
        )

        self.assertEqual(self.reactor.markers.tracked, frozenset({"DONE"}))
        self.assertIsNone(await self.reactor.handle(ChangeEvent(blocks=[block])))
        self.assertEqual(self.host.updates, [])

    async def test_empty_marker_settings_disable_reactor(self):
        """Test empty marker settings make the reactor do nothing."""
        self.reactor.apply_settings({"taskMarkers": "", "taskMarkersComplete": ""})
        block = self.host.add_block("DONE Buy milk", marker="DONE")

        self.assertIsNone(await self.reactor.handle(ChangeEvent(blocks=[block])))

    async def test_malformed_marker_settings_disable_reactor(self):
        """Test null, list and number marker settings leave the reactor inert."""
        for bad in (None, ["DONE"], 42):
            with self.subTest(bad=bad):
                self.reactor.apply_settings({"taskMarkers": bad, "taskMarkersComplete": bad})
                block = self.host.add_block("DONE Buy milk", marker="DONE")

                self.assertEqual(self.reactor.markers.tracked, frozenset())
                self.assertEqual(self.reactor.markers.complete, frozenset())
                self.assertIsNone(await self.reactor.handle(ChangeEvent(blocks=[block])))

        self.assertEqual(self.host.updates, [])

    async def test_complete_marker_must_be_tracked(self):
        """Test a complete marker outside the tracked set is not handled."""
        self.reactor.apply_settings({"taskMarkers": "TODO", "taskMarkersComplete": "DONE"})
        block = self.host.add_block("DONE Buy milk", marker="DONE")

        self.assertIsNone(await self.reactor.handle(ChangeEvent(blocks=[block])))

    async def test_host_failure_propagates(self):
        """Test update errors from the host are not caught by the reactor."""
        self.host.fail_updates = HostAPIError("update rejected", status_code=500)
        block = self.host.add_block("DONE Buy milk", marker="DONE")

        with self.assertRaises(HostAPIError):
            await self.reactor.handle(ChangeEvent(blocks=[block]))


class TestPlanUpdate(unittest.TestCase):
    """Test the update decision without a host round trip."""

    def setUp(self):
        self.reactor = CompletionReactor(InMemoryHost(), now=fixed_clock)

    def test_plan_requires_date_format(self):
        """Test planning a date without the host date format is refused."""
        block = Block(uuid="b1", content="DONE Task", marker="DONE")

        with self.assertRaises(ValueError):
            self.reactor.plan_update(block)

    def test_plan_with_date_format(self):
        """Test planning a date with an explicit format."""
        block = Block(uuid="b1", content="DONE Task", marker="DONE")

        request = self.reactor.plan_update(block, "yyyy-MM-dd")

        self.assertEqual(request.properties, {"completed": "[[2026-10-16]]"})
        self.assertEqual(request.content, "DONE Task\ncompleted:: [[2026-10-16]]")

    def test_empty_property_counts_as_missing(self):
        """Test an empty completion value is replaced."""
        block = Block(uuid="b1", content="DONE Task", marker="DONE", properties={"completed": ""})

        request = self.reactor.plan_update(block, "yyyy-MM-dd")

        self.assertEqual(request.properties, {"completed": "[[2026-10-16]]"})
        # The key is already a property, so no second line is appended
        self.assertEqual(request.content, "DONE Task")


if __name__ == '__main__':
    unittest.main()
