from __future__ import annotations

import logging

import anyio

from upload_intake.backend.app.application.uploads.dto import IntakeRequestDTO
from upload_intake.backend.app.application.uploads.headers import parse_part_header
from upload_intake.backend.app.application.uploads.interfaces import StoredNameGenerator
from upload_intake.backend.app.application.uploads.multipart_parser import (
    MultipartParser,
    ParserEvent,
    PartData,
    PartStarted,
    extract_boundary,
)
from upload_intake.backend.app.domain.files.interfaces import FileStorage, WritableHandle
from upload_intake.backend.app.domain.uploads.entities import (
    Accepted,
    IntakeResult,
    PartHeader,
    Rejected,
    StoredFile,
)
from upload_intake.backend.app.domain.uploads.errors import (
    FieldTooLarge,
    FileTooLarge,
    IntakeError,
    MalformedMultipart,
    StorageWriteFailed,
    TooManyFiles,
    TooManyParts,
    UnexpectedField,
    UnsupportedMediaType,
)
from upload_intake.backend.app.domain.uploads.value_objects import FieldRule, IntakeLimits, UploadPolicy

logger = logging.getLogger(__name__)


class IntakeUploadUseCase:
    """
    Parse a multipart/form-data body and store the files it carries.

    The policy is fail-fast and all-or-nothing: the first part that breaks a
    rule rejects the whole request and every file already written for it is
    deleted before the Rejected result is returned. The instance holds no
    per-request state and can serve concurrent requests.
    """

    def __init__(
        self,
        *,
        file_storage: FileStorage,
        policy: UploadPolicy,
        name_generator: StoredNameGenerator,
        limits: IntakeLimits | None = None,
    ) -> None:
        self._file_storage = file_storage
        self._policy = policy
        self._name_generator = name_generator
        self._limits = limits or IntakeLimits()

    async def execute(self, dto: IntakeRequestDTO) -> IntakeResult:
        run = _IntakeRun(
            storage=self._file_storage,
            policy=self._policy,
            limits=self._limits,
            name_generator=self._name_generator,
        )
        try:
            await run.consume(dto)
        except IntakeError as e:
            await run.rollback()
            logger.info("Upload rejected: %s (%s)", e.kind, e.detail)
            return Rejected(reason=e.kind, detail=e.detail)
        except BaseException:
            # cancellation or a bug: nothing written may survive either way
            await run.rollback()
            raise

        accepted = Accepted(files=tuple(run.files), fields=run.fields)
        logger.info(
            "Upload accepted: %d file(s), %d byte(s)",
            len(accepted.files),
            accepted.total_bytes,
        )
        return accepted


class _IntakeRun:
    """State owned by a single request."""

    def __init__(
        self,
        *,
        storage: FileStorage,
        policy: UploadPolicy,
        limits: IntakeLimits,
        name_generator: StoredNameGenerator,
    ) -> None:
        self._storage = storage
        self._policy = policy
        self._limits = limits
        self._name_generator = name_generator

        self.files: list[StoredFile] = []
        self.fields: dict[str, list[str]] = {}
        self._counts: dict[str, int] = {}
        self._created: list[str] = []
        self._parts = 0

        # current part
        self._header: PartHeader | None = None
        self._rule: FieldRule | None = None
        self._handle: WritableHandle | None = None
        self._field_value: bytearray | None = None
        self._deferred = False
        self._size = 0

    async def consume(self, dto: IntakeRequestDTO) -> None:
        boundary = extract_boundary(dto.content_type)
        parser = MultipartParser(boundary, max_header_bytes=self._limits.max_header_bytes)

        stream = aiter(dto.body)
        while True:
            try:
                chunk = await anext(stream)
            except StopAsyncIteration:
                break
            except Exception as e:
                logger.warning("Upload stream interrupted: %r", e)
                raise StorageWriteFailed("Upload was interrupted before it completed") from e

            for event in parser.feed(chunk):
                await self._dispatch(event)

        parser.finish()

    async def rollback(self) -> None:
        with anyio.CancelScope(shield=True):
            if self._handle is not None:
                handle, self._handle = self._handle, None
                try:
                    await self._storage.close(handle)
                except Exception:
                    logger.warning("Failed to close %s during rollback", handle.name, exc_info=True)

            for name in reversed(self._created):
                try:
                    await self._storage.delete(name)
                except Exception:
                    logger.warning("Failed to delete %s during rollback", name, exc_info=True)
            self._created.clear()
            self.files.clear()

    # ---------- events ----------

    async def _dispatch(self, event: ParserEvent) -> None:
        if isinstance(event, PartStarted):
            await self._start_part(parse_part_header(event.headers))
        elif isinstance(event, PartData):
            await self._part_data(event.data)
        else:
            await self._end_part()

    async def _start_part(self, header: PartHeader) -> None:
        self._parts += 1
        if self._parts > self._limits.max_parts:
            raise TooManyParts(f"Too many parts; at most {self._limits.max_parts} are allowed")

        self._header = header
        self._size = 0
        if not header.is_file:
            self._field_value = bytearray()
            return
        if header.has_filename and not header.original_filename:
            # an empty file input; admitted only if bytes turn up
            self._deferred = True
            return
        await self._admit_file(header)

    async def _admit_file(self, header: PartHeader) -> None:
        name = header.field_name
        rule = self._policy.rule_for(name)
        if rule is None:
            raise UnexpectedField(f"Unexpected file field '{name}'")
        if not rule.allows_mime(header.declared_mime_type):
            allowed = ", ".join(sorted(rule.allowed_mime_types))
            raise UnsupportedMediaType(f"Only {allowed} files are allowed for {name}")
        if self._counts.get(name, 0) >= rule.max_count:
            raise TooManyFiles(
                f"Too many files uploaded for field '{name}'; at most {rule.max_count} allowed"
            )
        self._counts[name] = self._counts.get(name, 0) + 1
        self._rule = rule

        stored_name = self._name_generator.generate(header.original_filename)
        # tracked before create() so a half-created destination is still removed
        self._created.append(stored_name)
        try:
            self._handle = await self._storage.create(stored_name)
        except Exception as e:
            logger.exception("Could not create %s", stored_name)
            raise StorageWriteFailed() from e

    async def _part_data(self, data: bytes) -> None:
        if self._field_value is not None:
            if len(self._field_value) + len(data) > self._limits.max_field_bytes:
                raise FieldTooLarge(
                    f"Value of field '{self._header.field_name}' exceeds "
                    f"{_format_size(self._limits.max_field_bytes)}"
                )
            self._field_value += data
            return
        if self._deferred:
            self._deferred = False
            await self._admit_file(self._header)

        self._size += len(data)
        if self._size > self._rule.max_bytes_per_file:
            raise FileTooLarge(
                f"File size exceeds the limit of {_format_size(self._rule.max_bytes_per_file)} "
                f"for field '{self._header.field_name}'"
            )
        try:
            await self._storage.write(self._handle, data)
        except Exception as e:
            logger.exception("Could not write to %s", self._handle.name)
            raise StorageWriteFailed() from e

    async def _end_part(self) -> None:
        header = self._header
        if self._field_value is not None:
            try:
                value = self._field_value.decode("utf-8")
            except UnicodeDecodeError as e:
                raise MalformedMultipart(f"Field '{header.field_name}' is not valid UTF-8") from e
            self.fields.setdefault(header.field_name, []).append(value)
        elif self._handle is not None:
            handle = self._handle
            try:
                await self._storage.close(handle)
            except Exception as e:
                logger.exception("Could not flush %s", handle.name)
                raise StorageWriteFailed() from e
            self._handle = None
            self.files.append(
                StoredFile(
                    field_name=header.field_name,
                    stored_name=handle.name,
                    original_filename=header.original_filename,
                    mime_type=header.declared_mime_type,
                    size_bytes=self._size,
                    storage_path=handle.storage_path,
                )
            )

        self._header = None
        self._rule = None
        self._field_value = None
        self._size = 0
        self._deferred = False


def _format_size(size: int) -> str:
    mb = 1024 * 1024
    if size >= mb and size % mb == 0:
        return f"{size // mb}MB"
    if size >= 1024 and size % 1024 == 0:
        return f"{size // 1024}KB"
    return f"{size} bytes"
