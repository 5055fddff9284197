from __future__ import annotations

import os
from pathlib import Path

import anyio
from anyio import AsyncFile


class FilesystemWritableHandle:
    __slots__ = ("name", "storage_path", "file")

    def __init__(self, name: str, storage_path: str, file: AsyncFile[bytes]) -> None:
        self.name = name
        self.storage_path = storage_path
        self.file: AsyncFile[bytes] | None = file

    def __repr__(self) -> str:
        return f"FilesystemWritableHandle(name={self.name!r})"


class FilesystemFileStorage:
    def __init__(self, base_dir: Path, *, fsync: bool = True) -> None:
        self._base_dir = base_dir
        self._fsync = fsync

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    async def create(self, unique_name: str) -> FilesystemWritableHandle:
        full_path = self._resolve(unique_name)
        await anyio.Path(self._base_dir).mkdir(parents=True, exist_ok=True)

        # "x": never overwrite an existing stored file
        file = await anyio.open_file(full_path, "xb")
        rel_path = os.path.relpath(full_path, self._base_dir)
        return FilesystemWritableHandle(unique_name, rel_path, file)

    async def write(self, handle: FilesystemWritableHandle, data: bytes) -> None:
        if handle.file is None:
            raise ValueError(f"{handle!r} is already closed")
        await handle.file.write(data)

    async def close(self, handle: FilesystemWritableHandle) -> None:
        file = handle.file
        if file is None:
            return
        handle.file = None
        try:
            await file.flush()
            if self._fsync:
                await anyio.to_thread.run_sync(os.fsync, file.wrapped.fileno())
        finally:
            await file.aclose()

    async def delete(self, name: str) -> None:
        full_path = self._resolve(name)
        await anyio.Path(full_path).unlink(missing_ok=True)

    def _resolve(self, name: str) -> Path:
        # stored names are flat; anything that walks out of base_dir is refused
        if not name or name in {".", ".."} or Path(name).name != name or "\\" in name:
            raise ValueError(f"Invalid stored name: {name!r}")
        return self._base_dir / name
