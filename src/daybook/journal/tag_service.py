"""Tag listing and management."""

from __future__ import annotations

from loguru import logger

from daybook.core.exceptions import MutationError, TransientFetchError, ValidationError

from .models import Tag, check_color
from .store import DaybookBackend


class TagService:
    """Async facade over the tag endpoints of a :class:`DaybookBackend`."""

    def __init__(self, backend: DaybookBackend):
        self.backend = backend

    async def list_tags(self) -> list[Tag]:
        """All tags, sorted by name."""
        try:
            tags = await self.backend.fetch_tags()
        except Exception as e:
            logger.warning(f"Failed to load tags: {e}")
            raise TransientFetchError(f"Failed to load tags: {e}") from e
        return sorted(tags, key=lambda t: t.name.lower())

    async def create_tag(self, name: str, color: str | None = None) -> Tag:
        """Create a tag. Names are trimmed; *color* must be ``#rrggbb`` if given.

        Raises:
            ValidationError: Before any network call, for a blank name or bad color.
            MutationError: If the server rejects the create.
        """
        if not name or not name.strip():
            raise ValidationError("Tag name is required")
        if color is not None:
            check_color(color)
        try:
            return await self.backend.create_tag(name.strip(), color)
        except Exception as e:
            logger.warning(f"Could not create tag {name!r}: {e}")
            raise MutationError(f"Could not create tag {name!r}: {e}") from e

    async def delete_tag(self, tag_id: int) -> None:
        try:
            await self.backend.delete_tag(tag_id)
        except Exception as e:
            logger.warning(f"Could not delete tag {tag_id}: {e}")
            raise MutationError(f"Could not delete tag {tag_id}: {e}") from e
