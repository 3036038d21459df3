"""Tests for the registry error taxonomy."""

from postreg.domain.errors import (
    AggregateBuildError,
    DuplicateSlug,
    MalformedDocument,
    PostError,
    ValidationError,
    ValidationKind,
)


def test_str_includes_source() -> None:
    err = MalformedDocument("never closed", source_id="a.md")
    assert str(err) == "a.md: never closed"
    assert str(MalformedDocument("never closed")) == "never closed"


def test_with_source_does_not_overwrite() -> None:
    err = MalformedDocument("x", source_id="a.md")
    assert err.with_source("b.md").source_id == "a.md"
    assert MalformedDocument("x").with_source("b.md").source_id == "b.md"


def test_validation_code_follows_kind() -> None:
    err = ValidationError(ValidationKind.INVALID_DATE, "bad date")
    assert err.code == "INVALID_DATE"
    assert isinstance(err, PostError)


def test_to_dict() -> None:
    err = ValidationError(
        ValidationKind.MISSING_FIELD,
        "Missing required field(s): title",
        source_id="a.md",
        detail={"fields": ["title"]},
    )
    assert err.to_dict() == {
        "code": "MISSING_FIELD",
        "message": "Missing required field(s): title",
        "source_id": "a.md",
        "detail": {"fields": ["title"]},
    }


def test_duplicate_slug_lists_every_collision() -> None:
    err = DuplicateSlug({"2024-06-02-a": ["a.md", "b.md"], "2024-06-03-c": ["c.md", "d.md"]})
    assert err.detail == {"collisions": {"2024-06-02-a": ["a.md", "b.md"], "2024-06-03-c": ["c.md", "d.md"]}}
    assert err.slugs == ["2024-06-02-a", "2024-06-03-c"]
    assert err.message.startswith("2 slugs are claimed by more than one post")
    assert "2024-06-02-a (a.md, b.md)" in err.message
    assert err.source_id is None


def test_aggregate_splits_errors() -> None:
    malformed = MalformedDocument("x", source_id="a.md")
    dup = DuplicateSlug({"s": ["b.md", "c.md"]})
    agg = AggregateBuildError([malformed, dup])
    assert agg.code == "BUILD_FAILED"
    assert agg.document_errors == [malformed]
    assert agg.duplicate is dup
    assert AggregateBuildError([malformed]).duplicate is None
    assert agg.message == "Registry build failed with 2 errors"
    assert [e["code"] for e in agg.to_dict()["errors"]] == ["MALFORMED_DOCUMENT", "DUPLICATE_SLUG"]
