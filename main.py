#!/usr/bin/env python3
"""
Completed Tasks - command-line runner

Drives the plugin against a running Logseq desktop application through its
local HTTP API server. The API does not stream change notifications, so the
reactor is run on demand for the blocks named on the command line.
"""

import asyncio
import logging
import sys
import argparse
from typing import List

from completed_tasks import __version__
from completed_tasks.commands import insert_weekly_query
from completed_tasks.config import ConfigManager, get_config
from completed_tasks.host import LogseqAPIHost
from completed_tasks.models import ChangeEvent
from completed_tasks.plugin import CompletedTasksPlugin


def setup_logging(cfg: ConfigManager):
    """Configure logging for the application."""
    level = getattr(logging, cfg.log_level.upper(), logging.INFO)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if cfg.log_filename:
        handlers.append(logging.FileHandler(cfg.log_filename))

    logging.basicConfig(
        level=level,
        format=cfg.log_format,
        handlers=handlers
    )


def create_host(cfg: ConfigManager) -> LogseqAPIHost:
    """Create the HTTP API host from configuration."""
    if not cfg.api_token:
        logging.warning("No logseq.api_token configured; requests will be sent without authorization")
    return LogseqAPIHost(api_url=cfg.api_url, api_token=cfg.api_token, timeout=cfg.api_timeout)


async def run_weekly_query(cfg: ConfigManager) -> bool:
    """
    Insert the weekly completed-tasks query at the current block.

    Returns:
        True if the blocks were inserted
    """
    async with create_host(cfg) as host:
        plugin = CompletedTasksPlugin(host, cfg.plugin_settings)
        inserted = await insert_weekly_query(host, plugin.settings)

    if inserted is None:
        logging.warning("Nothing inserted: no block is being edited")
        return False
    return True


async def run_reconcile(cfg: ConfigManager, uuids: List[str]) -> int:
    """
    Reconcile completion properties of the given blocks.

    The blocks are delivered to the reactor as one change event, so only the
    first block with a tracked marker is updated.

    Returns:
        Number of blocks updated (0 or 1)
    """
    async with create_host(cfg) as host:
        plugin = CompletedTasksPlugin(host, cfg.plugin_settings)

        blocks = []
        for uuid in uuids:
            block = await host.get_block(uuid)
            if block is None:
                logging.warning(f"Block not found: {uuid}")
                continue
            blocks.append(block)

        request = await plugin.reactor.handle(ChangeEvent(blocks=blocks))

    if request is None:
        logging.info("No completion properties to change")
        return 0
    return 1


def parse_arguments():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Completed Tasks - completion properties for Logseq tasks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py weekly-query                      # Insert the past-week query at the current block
  python main.py reconcile 6523a1b2-...            # Add or remove completion properties of a block
  python main.py --config my.yaml reconcile UUID   # Use another configuration file
        """
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to the configuration file (default: config.yaml)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Completed Tasks {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "weekly-query",
        help="Insert a query for the tasks completed in the past week"
    )

    reconcile_parser = subparsers.add_parser(
        "reconcile",
        help="Reconcile completion properties of blocks"
    )
    reconcile_parser.add_argument(
        "uuids",
        nargs="+",
        help="Block UUIDs, in change order"
    )

    return parser.parse_args()


def main():
    """Main entry point."""
    args = parse_arguments()
    cfg = ConfigManager(args.config) if args.config else get_config()
    setup_logging(cfg)

    try:
        if args.command == "weekly-query":
            ok = asyncio.run(run_weekly_query(cfg))
            sys.exit(0 if ok else 1)
        else:
            updated = asyncio.run(run_reconcile(cfg, args.uuids))
            print(f"Updated {updated} block(s)")

    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        print("\nInterrupted.")

    except Exception as e:
        logging.error(f"Command failed: {e}")
        print(f"\nCommand failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
