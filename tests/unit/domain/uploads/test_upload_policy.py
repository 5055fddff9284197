from __future__ import annotations

import pytest

from upload_intake.backend.app.domain.uploads import (
    FieldRule,
    FileTooLarge,
    RejectionKind,
    StorageWriteFailed,
    UploadPolicy,
    error_for,
)


def test_field_rule_normalizes_mime_types():
    rule = FieldRule(
        allowed_mime_types=frozenset({" Image/JPEG ", "image/png"}),
        max_count=1,
        max_bytes_per_file=10,
    )

    assert rule.allowed_mime_types == frozenset({"image/jpeg", "image/png"})
    assert rule.allows_mime("IMAGE/PNG")
    assert not rule.allows_mime("text/plain")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"allowed_mime_types": frozenset(), "max_count": 1, "max_bytes_per_file": 1},
        {"allowed_mime_types": frozenset({"a/b"}), "max_count": 0, "max_bytes_per_file": 1},
        {"allowed_mime_types": frozenset({"a/b"}), "max_count": 1, "max_bytes_per_file": 0},
    ],
)
def test_field_rule_rejects_nonsense(kwargs):
    with pytest.raises(ValueError):
        FieldRule(**kwargs)


def test_policy_lookup_and_immutability():
    rules = {"userfile": FieldRule(frozenset({"image/png"}), 1, 100)}
    policy = UploadPolicy(rules)
    rules["other"] = FieldRule(frozenset({"image/png"}), 1, 100)

    assert policy.allows("userfile")
    assert not policy.allows("other")
    assert policy.rule_for("missing") is None
    assert list(policy.field_names) == ["userfile"]
    assert policy.to_dict() == {
        "userfile": {"allowed_mime_types": ["image/png"], "max_count": 1, "max_bytes_per_file": 100}
    }


def test_error_for_rebuilds_the_matching_error():
    err = error_for(RejectionKind.FILE_TOO_LARGE, "too big")

    assert isinstance(err, FileTooLarge)
    assert err.kind is RejectionKind.FILE_TOO_LARGE
    assert err.detail == "too big"


def test_only_storage_failures_are_server_faults():
    assert [k for k in RejectionKind if not k.is_client_fault] == [RejectionKind.STORAGE_WRITE_FAILED]
    assert StorageWriteFailed().detail == "Could not store uploaded file"
