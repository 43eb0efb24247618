"""Category resolution.

Sellers pick categories by name. The resolver maps the name to an id via
the ``categories`` table and, on a miss, falls back to a static default
list embedded here, so that a missing or renamed category never aborts a
submission.

Static list format (one category per line):
    Electronics
    Fashion
    Home & Living
"""

from dataclasses import dataclass
from typing import Any
from uuid import NAMESPACE_URL, UUID, uuid5

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from sellerdesk.catalog.models import Category
from sellerdesk.domain.exceptions import CategoryNotFoundError, ValidationError
from sellerdesk.infrastructure.config import settings

logger = structlog.get_logger()

# Stable namespace so static ids are identical across processes and seeds.
CATEGORY_NAMESPACE: UUID = uuid5(NAMESPACE_URL, "sellerdesk:categories")


@dataclass(frozen=True)
class CategoryRef:
    """Resolved category.

    Attributes:
        id: Category id.
        name: Category name as stored.
        from_fallback: True when the static list supplied the id.
    """

    id: str
    name: str
    from_fallback: bool = False


def static_category_id(name: str) -> str:
    """Deterministic id of a static category."""
    return str(uuid5(CATEGORY_NAMESPACE, name.strip().lower()))


def category_name(value: Any) -> str:
    """Normalize a category given as a string or an object with ``name``.

    Args:
        value: Plain name, mapping with a ``name`` key, or object with a
            ``name`` attribute.

    Returns:
        Trimmed name (possibly empty).
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, dict):
        return str(value.get("name") or "").strip()
    return str(getattr(value, "name", "") or "").strip()


class StaticCategoryList:
    """Embedded default categories used when storage has no match.

    Example usage:
        defaults = StaticCategoryList()
        defaults.get_by_name("fashion")   # CategoryRef(id=..., name="Fashion")
        defaults.default()                # the "Others" category
    """

    EMBEDDED_CATEGORIES = '''
Electronics
Fashion
Beauty
Food
Home & Living
Sports
Books
Toys
Accessories
Others
'''.strip()

    def __init__(self, default_name: str | None = None) -> None:
        """Parse the embedded list.

        Args:
            default_name: Category used for unknown names. Defaults to the
                ``default_category_name`` setting.
        """
        self.default_name = default_name or settings.default_category_name
        self._by_key: dict[str, CategoryRef] = {}
        for line in self.EMBEDDED_CATEGORIES.splitlines():
            name = line.strip()
            if not name or name.startswith("#"):
                continue
            self._by_key[name.lower()] = CategoryRef(
                id=static_category_id(name), name=name, from_fallback=True
            )

    def get_all(self) -> list[CategoryRef]:
        """Get all static categories in list order."""
        return list(self._by_key.values())

    def get_by_name(self, name: str) -> CategoryRef | None:
        """Case-insensitive lookup by name."""
        return self._by_key.get(name.strip().lower())

    def default(self) -> CategoryRef:
        """Category assigned when nothing else matches."""
        return self.get_by_name(self.default_name) or CategoryRef(
            id=static_category_id(self.default_name),
            name=self.default_name,
            from_fallback=True,
        )


class CategoryResolver:
    """Resolves category names to ids.

    Example usage:
        resolver = CategoryResolver(session)
        category = await resolver.resolve("Fashion")
    """

    def __init__(
        self,
        session: AsyncSession,
        defaults: StaticCategoryList | None = None,
    ) -> None:
        """Initialize resolver.

        Args:
            session: Async SQLAlchemy session.
            defaults: Static fallback list.
        """
        self.session = session
        self.defaults = defaults or StaticCategoryList()

    async def find_by_name(self, name: str) -> CategoryRef:
        """Look a category up in storage (case-insensitive).

        Args:
            name: Category name.

        Returns:
            Stored category.

        Raises:
            CategoryNotFoundError: If no row matches.
        """
        result = await self.session.execute(
            select(Category).where(func.lower(Category.name) == name.strip().lower())
        )
        category = result.scalars().first()
        if category is None:
            raise CategoryNotFoundError(name)
        return CategoryRef(id=category.id, name=category.name)

    async def resolve(self, name: Any) -> CategoryRef:
        """Resolve a category, falling back to the static list on a miss.

        Args:
            name: Category name (or object carrying one).

        Returns:
            Resolved category; never None.

        Raises:
            ValidationError: If the name is blank.
        """
        cleaned = category_name(name)
        if not cleaned:
            raise ValidationError("category", "category is required")

        try:
            return await self.find_by_name(cleaned)
        except CategoryNotFoundError:
            fallback = self.defaults.get_by_name(cleaned) or self.defaults.default()
            logger.warning(
                "Category not found, using fallback",
                requested=cleaned,
                fallback_id=fallback.id,
                fallback_name=fallback.name,
            )
            return fallback
