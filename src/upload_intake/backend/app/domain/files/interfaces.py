from typing import Protocol, runtime_checkable


@runtime_checkable
class WritableHandle(Protocol):
    name: str
    storage_path: str


@runtime_checkable
class FileStorage(Protocol):
    async def create(self, unique_name: str) -> WritableHandle:
        """
        Open a new destination. unique_name MUST NOT already exist.
        """
        ...

    async def write(self, handle: WritableHandle, data: bytes) -> None:
        ...

    async def close(self, handle: WritableHandle) -> None:
        """
        Flush and release the handle. Contents are durable once this returns.
        Closing an already closed handle is a no-op.
        """
        ...

    async def delete(self, name: str) -> None:
        """
        Remove a stored file. Deleting a missing name is a no-op.
        """
        ...
