import pytest

from upload_intake.backend.app.domain.uploads import FieldRule, UploadPolicy
from tests.unit.fakes.file_storage import FakeFileStorage
from tests.unit.fakes.name_generator import SequentialNameGenerator

MB = 1024 * 1024


@pytest.fixture
def policy() -> UploadPolicy:
    return UploadPolicy(
        {
            "userfile": FieldRule(
                allowed_mime_types=frozenset({"image/jpeg", "image/png"}),
                max_count=1,
                max_bytes_per_file=3 * MB,
            ),
            "userdocuments": FieldRule(
                allowed_mime_types=frozenset({"application/pdf"}),
                max_count=3,
                max_bytes_per_file=3 * MB,
            ),
        }
    )


@pytest.fixture
def storage() -> FakeFileStorage:
    return FakeFileStorage()


@pytest.fixture
def names() -> SequentialNameGenerator:
    return SequentialNameGenerator()
