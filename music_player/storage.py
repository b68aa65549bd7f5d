from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JSONStorage:
    """JSON file holding the service state, keyed by collection name.

    Every operation reads the whole document under one lock, so ``update``
    doubles as the compare-and-write primitive for uniqueness checks.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = asyncio.Lock()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self.path.write_text("{}", encoding="utf-8")

    async def _read(self) -> Dict[str, Any]:
        def _load() -> Dict[str, Any]:
            try:
                payload = json.loads(self.path.read_text(encoding="utf-8"))
            except json.JSONDecodeError:
                logger.warning("State file %s is not valid JSON, starting empty", self.path)
                return {}
            return payload if isinstance(payload, dict) else {}

        return await asyncio.to_thread(_load)

    async def _write(self, payload: Dict[str, Any]) -> None:
        def _dump() -> None:
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
            tmp_path.replace(self.path)

        await asyncio.to_thread(_dump)

    async def get(self, key: str, default: Optional[Any] = None) -> Any:
        async with self._lock:
            data = await self._read()
            return data.get(key, default)

    async def set(self, key: str, value: Any) -> None:
        async with self._lock:
            data = await self._read()
            data[key] = value
            await self._write(data)

    async def delete(self, key: str) -> None:
        async with self._lock:
            data = await self._read()
            if key in data:
                data.pop(key)
                await self._write(data)

    async def update(self, key: str, mutate: Callable[[Any], Tuple[Any, T]], default: Any = None) -> T:
        """Apply ``mutate`` to the stored value and persist what it returns.

        ``mutate`` receives the current value and returns ``(new_value, result)``.
        If it raises, nothing is written and the exception propagates.
        """
        async with self._lock:
            data = await self._read()
            new_value, result = mutate(data.get(key, default))
            data[key] = new_value
            await self._write(data)
            return result
