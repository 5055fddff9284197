from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from upload_intake.backend.app.core.config import Settings
from upload_intake.backend.app.core.deps import build_intake_limits, build_upload_policy

MB = 1024 * 1024


def test_default_policy_matches_the_upload_form(monkeypatch):
    monkeypatch.delenv("UPLOAD_POLICY", raising=False)

    policy = build_upload_policy(Settings(_env_file=None))

    assert set(policy.field_names) == {"userfile", "userdocuments"}
    assert policy.rule_for("userfile").allowed_mime_types == frozenset({"image/jpeg", "image/png"})
    assert policy.rule_for("userfile").max_count == 1
    assert policy.rule_for("userdocuments").max_count == 3
    assert policy.rule_for("userdocuments").max_bytes_per_file == 3 * MB


def test_policy_from_environment(monkeypatch):
    monkeypatch.setenv(
        "UPLOAD_POLICY",
        json.dumps({"avatar": {"allowed_mime_types": ["Image/PNG"], "max_count": 2, "max_bytes_per_file": 512}}),
    )
    monkeypatch.setenv("MAX_PARTS", "10")

    cfg = Settings(_env_file=None)
    policy = build_upload_policy(cfg)

    assert list(policy.field_names) == ["avatar"]
    assert policy.rule_for("avatar").allowed_mime_types == frozenset({"image/png"})
    assert build_intake_limits(cfg).max_parts == 10


@pytest.mark.parametrize(
    "rule",
    [
        {"allowed_mime_types": [], "max_count": 1, "max_bytes_per_file": 1},
        {"allowed_mime_types": ["a/b"], "max_count": 0, "max_bytes_per_file": 1},
        {"allowed_mime_types": ["a/b"], "max_count": 1, "max_bytes_per_file": -5},
    ],
)
def test_invalid_policy_fails_at_startup(monkeypatch, rule):
    monkeypatch.setenv("UPLOAD_POLICY", json.dumps({"f": rule}))

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
