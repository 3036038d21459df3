"""The envelope every RegistryService operation returns.

``--json`` prints it as-is; the Rich and quiet renderers read ``op`` to
pick a layout. A failed build keeps each post's failure in
``error.detail["errors"]`` so nothing is lost on the way to the terminal.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from postreg.domain.errors import PostError


class ServiceError(BaseModel):
    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_post_error(cls, exc: PostError) -> ServiceError:
        """Wrap a domain error; an aggregate lists its members under ``errors``."""
        payload = exc.to_dict()
        detail = dict(payload.get("detail", {}))
        if "errors" in payload:
            detail["errors"] = payload["errors"]
        return cls(code=exc.code, message=exc.message, detail=detail)


class ServiceResult(BaseModel):
    """Outcome of one operation.

    Attributes:
        ok: False exactly when ``error`` is set.
        op: Operation name (``build``, ``list_posts``, ``show``, ...).
        data: Payload on success.
        warnings: Non-fatal notes, echoed to stderr in text mode.
        error: What went wrong, when ``ok`` is False.
        meta: Extra context; ``meta["telemetry"]`` holds spans under ``-v``.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def success(cls, op: str, **data: Any) -> ServiceResult:
        return cls(ok=True, op=op, data=data)

    @classmethod
    def failure(cls, op: str, error: ServiceError) -> ServiceResult:
        return cls(ok=False, op=op, error=error)
