"""In-process short link store with optional JSON snapshot persistence."""

import asyncio
import json
import logging
import os
from datetime import datetime
from typing import Optional, List, Dict, Any
from urllib.parse import urlparse

from ..errors import CodeConflictError
from .base import LinkStoreBase
from .locks import KeyedLocks
from .models import LinkRecord, utcnow


class MemoryLinkStore(LinkStoreBase):
    """Dictionary-backed store.

    ``memory://`` keeps everything in process; ``memory:///path/links.json``
    additionally writes a full snapshot after every mutation and reloads it
    on startup. Only safe for a single server process.

    Writers take per-code locks, then the snapshot lock for the mutation and
    its snapshot write. Readers use plain dict lookups. Records are
    immutable, and every mutation of the two indexes happens between awaits,
    so a reader always sees a record under the code it carries.
    """

    def __init__(
        self,
        db_config: str = "memory://",
        retire_deleted_codes: bool = True,
        retirement_seconds: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(db_config, retire_deleted_codes, retirement_seconds)

        self.logger = logger or logging.getLogger(__name__)
        parsed = urlparse(db_config)
        # memory:///abs/path.json or memory://relative/path.json
        self.snapshot_path = (parsed.netloc + parsed.path) or None

        self._by_code: Dict[str, LinkRecord] = {}
        self._by_id: Dict[str, str] = {}
        self._retired: Dict[str, Optional[datetime]] = {}
        self._locks = KeyedLocks()
        self._snapshot_lock = asyncio.Lock()

        if self.snapshot_path and os.path.exists(self.snapshot_path):
            self._load_snapshot()

    def _is_retired(self, short_code: str) -> bool:
        if short_code not in self._retired:
            return False
        until = self._retired[short_code]
        if until is not None and until <= utcnow():
            del self._retired[short_code]
            return False
        return True

    async def put(self, record: LinkRecord) -> LinkRecord:
        async with self._locks.hold(record.short_code):
            if record.short_code in self._by_code or self._is_retired(record.short_code):
                raise CodeConflictError(record.short_code)
            if record.id in self._by_id:
                raise ValueError(f"Link id '{record.id}' already exists")

            async with self._snapshot_lock:
                self._by_code[record.short_code] = record
                self._by_id[record.id] = record.short_code
                try:
                    await self._persist()
                except BaseException:
                    del self._by_code[record.short_code]
                    del self._by_id[record.id]
                    raise

        self.logger.debug(f"Stored {record.short_code} -> {record.original_url}")
        return record

    async def get(self, short_code: str) -> Optional[LinkRecord]:
        return self._by_code.get(short_code)

    async def get_by_id(self, link_id: str) -> Optional[LinkRecord]:
        short_code = self._by_id.get(link_id)
        if short_code is None:
            return None
        record = self._by_code.get(short_code)
        if record is None or record.id != link_id:
            return None
        return record

    async def remove(self, link_id: str) -> Optional[LinkRecord]:
        while True:
            short_code = self._by_id.get(link_id)
            if short_code is None:
                return None

            async with self._locks.hold(short_code):
                # Renamed while we waited; try again under the new code
                if self._by_id.get(link_id) != short_code:
                    continue

                async with self._snapshot_lock:
                    record = self._by_code.pop(short_code)
                    del self._by_id[link_id]
                    if self.retire_deleted_codes:
                        self._retired[short_code] = self._retired_until()
                    try:
                        await self._persist()
                    except BaseException:
                        self._by_code[short_code] = record
                        self._by_id[link_id] = short_code
                        # A live code is never retired, so nothing else to restore
                        self._retired.pop(short_code, None)
                        raise
                return record

    async def rename(self, link_id: str, new_code: str) -> Optional[LinkRecord]:
        while True:
            current = await self.get_by_id(link_id)
            if current is None:
                return None
            if current.short_code == new_code:
                return current

            async with self._locks.hold(current.short_code, new_code):
                if self._by_id.get(link_id) != current.short_code:
                    continue

                if new_code in self._by_code or self._is_retired(new_code):
                    raise CodeConflictError(new_code)

                updated = current.with_short_code(new_code)
                # New key first: a concurrent reader finds the link under
                # either the old or the new code, never neither.
                async with self._snapshot_lock:
                    self._by_code[new_code] = updated
                    self._by_id[link_id] = new_code
                    del self._by_code[current.short_code]
                    try:
                        await self._persist()
                    except BaseException:
                        self._by_code[current.short_code] = current
                        self._by_id[link_id] = current.short_code
                        del self._by_code[new_code]
                        raise
                return updated

    async def list_links(
        self,
        owner: Optional[str] = None,
        limit: int = 100,
    ) -> List[LinkRecord]:
        records = [
            record for record in self._by_code.values()
            if owner is None or record.owner == owner
        ]
        records.sort(key=lambda r: r.created_at, reverse=True)
        return records[:limit]

    async def code_exists(self, short_code: str) -> bool:
        return short_code in self._by_code or self._is_retired(short_code)

    async def get_statistics(self) -> Dict[str, Any]:
        retired = sum(1 for code in list(self._retired) if self._is_retired(code))
        return {
            "total_links": len(self._by_code),
            "retired_codes": retired,
            "database": "memory",
        }

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        async with self._snapshot_lock:
            await self._persist()

    async def _persist(self) -> None:
        """Write a full snapshot if a snapshot file is configured.

        Callers hold ``_snapshot_lock`` from their mutation until the write
        (or its rollback) is done, so a snapshot never contains another
        writer's uncommitted change.
        """
        if not self.snapshot_path:
            return
        data = {
            "links": [record.to_dict() for record in self._by_code.values()],
            "retired": {
                code: until.isoformat() if until else None
                for code, until in self._retired.items()
            },
        }
        await asyncio.to_thread(self._write_snapshot, data)

    def _write_snapshot(self, data: Dict[str, Any]) -> None:
        directory = os.path.dirname(os.path.abspath(self.snapshot_path))
        os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.snapshot_path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp_path, self.snapshot_path)

    def _load_snapshot(self) -> None:
        with open(self.snapshot_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        for item in data.get("links", []):
            record = LinkRecord.from_dict(item)
            self._by_code[record.short_code] = record
            self._by_id[record.id] = record.short_code

        for code, until in data.get("retired", {}).items():
            self._retired[code] = datetime.fromisoformat(until) if until else None

        self.logger.info(
            f"Loaded {len(self._by_code)} links and {len(self._retired)} retired codes "
            f"from {self.snapshot_path}"
        )
