"""BaseService — shared foundation for postreg services.

Every service receives the resolved :class:`PostregSettings` at
construction time and reads everything else (content root, worker
count, default timezone) from it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from postreg.config.settings import PostregSettings


class BaseService:
    """Base for service-layer classes.

    Usage::

        class RegistryService(BaseService):
            def build(self) -> ServiceResult:
                root = self._settings.posts_root
                ...
    """

    def __init__(self, settings: PostregSettings) -> None:
        self._settings = settings
