#!/usr/bin/env python3
"""
Command-line interface for the short link service.

Usage:
    python shortlink_cli.py shorten <url> [--alias CODE] [--owner OWNER]
    python shortlink_cli.py resolve <short_code>
    python shortlink_cli.py list [--owner OWNER] [--limit N]
    python shortlink_cli.py rename <link_id> <new_code>
    python shortlink_cli.py delete <link_id>
    python shortlink_cli.py health
"""

import argparse
import asyncio
import json
import sys
import os
from typing import Any, Dict, Optional

# Add parent directories to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from app import build_service
from config import load_config
from shortlink.errors import ShortenerError
from shortlink.service import ShortLinkService
from shortlink.common.logging_config import setup_logging


class ShortLinkCLI:
    """Command-line interface for the short link service."""

    def __init__(self, db_url: str, redis_url: Optional[str] = None, verbose: bool = False):
        self.db_url = db_url
        self.redis_url = redis_url
        self.verbose = verbose
        self.logger = setup_logging(level="DEBUG" if verbose else "WARNING")
        self.service: Optional[ShortLinkService] = None

    async def initialize(self):
        """Build the service from the same settings the server uses."""
        config = load_config(database_url=self.db_url, redis_url=self.redis_url)
        self.service = build_service(config, self.logger)
        if self.service.cache:
            await self.service.cache.connect()

    async def cleanup(self):
        """Cleanup resources."""
        if self.service:
            await self.service.close()

    @staticmethod
    def _emit(payload: Dict[str, Any], error: bool = False) -> int:
        print(json.dumps(payload, indent=2), file=sys.stderr if error else sys.stdout)
        return 1 if error else 0

    def _fail(self, e: ShortenerError) -> int:
        return self._emit({"success": False, "error": e.code, "message": str(e)}, error=True)

    async def shorten(self, url: str, alias: Optional[str] = None, owner: Optional[str] = None):
        """Shorten a URL."""
        try:
            record = await self.service.create_link(url, custom_alias=alias, owner=owner)
        except ShortenerError as e:
            return self._fail(e)

        return self._emit({
            "success": True,
            **record.to_dict(),
            "message": f"Successfully shortened URL to: {record.short_code}",
        })

    async def resolve(self, short_code: str):
        """Get original URL for a short code."""
        try:
            original_url = await self.service.resolve(short_code)
        except ShortenerError as e:
            return self._fail(e)

        return self._emit({
            "success": True,
            "short_code": short_code,
            "original_url": original_url,
        })

    async def list_links(self, owner: Optional[str] = None, limit: int = 100):
        """List recent links."""
        records = await self.service.list_links(owner=owner, limit=limit)
        return self._emit({
            "success": True,
            "count": len(records),
            "links": [record.to_dict() for record in records],
        })

    async def rename(self, link_id: str, new_code: str):
        """Give a link a new short code."""
        try:
            record = await self.service.rename_link(link_id, new_code)
        except ShortenerError as e:
            return self._fail(e)

        return self._emit({"success": True, **record.to_dict()})

    async def delete(self, link_id: str):
        """Delete a link."""
        try:
            record = await self.service.delete_link(link_id)
        except ShortenerError as e:
            return self._fail(e)

        return self._emit({"success": True, "deleted": record.to_dict()})

    async def health(self):
        """Check service health."""
        health_status = await self.service.health_check()
        stats = await self.service.get_statistics()

        self._emit({
            "success": True,
            "health": health_status,
            "statistics": stats,
        })
        return 0 if health_status["overall"] else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Short link CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Shorten a URL
  %(prog)s shorten https://example.com/long/url

  # Shorten with a custom alias
  %(prog)s shorten https://example.com/long/url --alias mylink

  # Resolve a short code
  %(prog)s resolve mylink

  # Rename and delete by link id
  %(prog)s rename 4f1c0a9b6e2d4c4f9a3b1e7d2c5a8f10 newalias
  %(prog)s delete 4f1c0a9b6e2d4c4f9a3b1e7d2c5a8f10
        """
    )

    parser.add_argument(
        "--db-url",
        default=os.getenv("DATABASE_URL", "memory://shortlinks.json"),
        help="Link store URL (default: from DATABASE_URL env or memory://shortlinks.json)"
    )
    parser.add_argument(
        "--redis-url",
        default=os.getenv("REDIS_URL"),
        help="Redis connection URL (optional, default: from REDIS_URL env)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    shorten_parser = subparsers.add_parser("shorten", help="Shorten a URL")
    shorten_parser.add_argument("url", help="URL to shorten")
    shorten_parser.add_argument("--alias", help="Custom short code")
    shorten_parser.add_argument("--owner", help="Owner reference")

    resolve_parser = subparsers.add_parser("resolve", help="Get original URL")
    resolve_parser.add_argument("short_code", help="Short code to lookup")

    list_parser = subparsers.add_parser("list", help="List recent links")
    list_parser.add_argument("--owner", help="Only links of this owner")
    list_parser.add_argument("--limit", type=int, default=100, help="Maximum number to return")

    rename_parser = subparsers.add_parser("rename", help="Change a link's short code")
    rename_parser.add_argument("link_id", help="Link id")
    rename_parser.add_argument("new_code", help="New short code")

    delete_parser = subparsers.add_parser("delete", help="Delete a link")
    delete_parser.add_argument("link_id", help="Link id")

    subparsers.add_parser("health", help="Check service health")

    return parser


async def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    cli = ShortLinkCLI(
        db_url=args.db_url,
        redis_url=args.redis_url,
        verbose=args.verbose,
    )

    try:
        await cli.initialize()

        if args.command == "shorten":
            return await cli.shorten(args.url, args.alias, args.owner)
        elif args.command == "resolve":
            return await cli.resolve(args.short_code)
        elif args.command == "list":
            return await cli.list_links(args.owner, args.limit)
        elif args.command == "rename":
            return await cli.rename(args.link_id, args.new_code)
        elif args.command == "delete":
            return await cli.delete(args.link_id)
        elif args.command == "health":
            return await cli.health()
        else:
            parser.print_help()
            return 1

    finally:
        await cli.cleanup()


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
