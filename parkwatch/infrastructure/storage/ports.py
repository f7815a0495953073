from __future__ import annotations

from typing import Protocol


class StorageService(Protocol):
    async def put_object(self, key: str, data: bytes, content_type: str) -> None: ...

    async def get_read_url(self, key: str) -> str:
        """Long-lived URL a client can GET the stored object from."""
        ...
