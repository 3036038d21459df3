"""Tests for output formatting and operation-specific renderers."""

import json

from postreg.output.formatters import OutputSettings, format_result
from postreg.output.renderers import render_quiet, render_result
from postreg.services.result import ServiceError, ServiceResult

POST_A = {
    "slug": "2026-02-08-git-guide",
    "title": "Git Guide",
    "date": "2026-02-08T21:00:00+05:30",
    "categories": ["DevOps"],
    "tags": ["git"],
    "source_id": "2026-02-08-git-guide.md",
}
POST_B = {
    "slug": "2024-06-02-ckad-guide",
    "title": "CKAD Guide",
    "date": "2024-06-02T12:09:45+00:00",
    "categories": ["DevOps", "Kubernetes"],
    "tags": ["ckad", "kubernetes"],
    "source_id": "2024-06-02-ckad-guide.md",
}


def _ok(op: str, **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _build_failure() -> ServiceResult:
    return ServiceResult(
        ok=False,
        op="build",
        error=ServiceError(
            code="BUILD_FAILED",
            message="Registry build failed with 2 errors",
            detail={
                "errors": [
                    {"code": "MALFORMED_DOCUMENT", "message": "never closed", "source_id": "open.md"},
                    {
                        "code": "DUPLICATE_SLUG",
                        "message": "1 slug is claimed by more than one post: x (x.md, y.md)",
                        "source_id": None,
                        "detail": {"collisions": {"x": ["x.md", "y.md"]}},
                    },
                ]
            },
        ),
    )


class TestErrorRenderer:
    def test_lists_every_failure(self) -> None:
        output = render_result(_build_failure())
        assert "ERROR" in output
        assert "Registry build failed with 2 errors" in output
        assert "open.md" in output
        assert "MALFORMED_DOCUMENT" in output
        assert "never closed" in output
        assert "DUPLICATE_SLUG" in output
        assert "x.md, y.md" in output

    def test_verbose_shows_detail(self) -> None:
        result = ServiceResult(
            ok=False,
            op="show",
            error=ServiceError(code="NOT_FOUND", message="No post", detail={"slug": "x"}),
        )
        output = render_result(result, verbose=True)
        assert "detail" in output
        assert "slug: x" in output

    def test_no_error_object(self) -> None:
        output = render_result(ServiceResult(ok=False, op="build"))
        assert "Unknown error" in output


class TestOpRenderers:
    def test_build_summary(self) -> None:
        result = _ok("build", count=2, tags={"git": 1, "ckad": 1}, categories={"DevOps": 2}, posts=[POST_A, POST_B])
        output = render_result(result)
        assert "OK" in output
        assert "posts: 2" in output
        assert "tags: 2" in output
        assert "Git Guide" not in output

    def test_build_verbose_lists_posts(self) -> None:
        post = {**POST_A, "slug": "2024-01-01-a", "title": "Alpha", "source_id": "a.md"}
        result = _ok("build", count=1, tags={}, categories={}, posts=[post])
        output = render_result(result, verbose=True)
        assert "Alpha" in output
        assert "a.md" in output

    def test_post_list(self) -> None:
        result = _ok("list_posts", count=2, total=2, filters={"category": "DevOps"}, items=[POST_A, POST_B])
        output = render_result(result)
        assert output.index("Git Guide") < output.index("CKAD Guide")
        assert "2026-02-08" in output
        assert "2 of 2 posts category=DevOps" in output

    def test_show(self) -> None:
        data = {
            **POST_B,
            "description": "Exam prep",
            "body": "Secret body",
            "related": [POST_A],
            "newer": POST_A["slug"],
            "older": None,
        }
        output = render_result(_ok("show", **data))
        assert "2024-06-02-ckad-guide — CKAD Guide" in output
        assert "tags: ckad, kubernetes" in output
        assert "related" in output
        assert "Git Guide" in output
        assert "Secret body" not in output
        assert "Secret body" in render_result(_ok("show", **data), verbose=True)

    def test_tag_counts(self) -> None:
        result = _ok("list_tags", count=2, items=[{"name": "git", "posts": 1}, {"name": "java", "posts": 3}])
        output = render_result(result)
        assert "Tag" in output
        assert "java" in output
        assert "2 tags" in output

    def test_category_counts(self) -> None:
        result = _ok("list_categories", count=1, items=[{"name": "DevOps", "posts": 2}])
        output = render_result(result)
        assert "Category" in output
        assert "1 categories" in output

    def test_generic_fallback(self) -> None:
        output = render_result(_ok("unknown_op", alpha=1, beta=["x"]))
        assert "alpha: 1" in output
        assert 'beta: ["x"]' in output


class TestQuiet:
    def test_slugs_only(self) -> None:
        result = _ok("list_posts", items=[POST_A, POST_B])
        assert render_quiet(result) == "2026-02-08-git-guide\n2024-06-02-ckad-guide"

    def test_names_only(self) -> None:
        result = _ok("list_tags", items=[{"name": "git", "posts": 1}])
        assert render_quiet(result) == "git"

    def test_error_lists_sources(self) -> None:
        output = render_quiet(_build_failure())
        assert output.splitlines()[1:] == [
            "open.md: MALFORMED_DOCUMENT",
            "x.md: DUPLICATE_SLUG",
            "y.md: DUPLICATE_SLUG",
        ]


class TestFormatResult:
    def test_json(self) -> None:
        output = format_result(_ok("build", count=0), settings=OutputSettings(json_output=True))
        parsed = json.loads(output)
        assert parsed["ok"] is True
        assert parsed["data"] == {"count": 0}

    def test_default_is_rich(self) -> None:
        assert format_result(_ok("build", count=0, tags={}, categories={})).startswith("OK")


class TestTelemetryRendering:
    def test_span_tree_in_verbose_mode(self) -> None:
        meta = {
            "telemetry": {
                "name": "RegistryService.list_tags",
                "duration_ms": 4.2,
                "children": [
                    {"name": "load_sources", "duration_ms": 1.5, "counts": {"documents": 3}, "children": []},
                ],
            }
        }
        result = ServiceResult(ok=True, op="list_tags", data={"count": 0, "items": []}, meta=meta)
        output = render_result(result, verbose=True)
        assert "RegistryService.list_tags" in output
        assert "load_sources  (documents=3)" in output
        assert "load_sources" not in render_result(result)
