"""
Faceted filtering, related images and before/after pairing over the portfolio.

Every public coroutine here is read-only and fails soft: store errors are
logged and turned into an empty result, so callers can always render an
empty state instead of an error.
"""
import asyncio
import re
from collections import Counter
from typing import Callable, Iterable, List, Optional
from app.models import (
    BeforeAfterPair, Category, FilterableAttribute, FilterableAttributes,
    FilterOptions, PortfolioImage,
)
from app.services.portfolio_store import PortfolioStore
import logging

logger = logging.getLogger(__name__)

UNKNOWN_CATEGORY = "Unknown Category"

_BEFORE = re.compile(r"\s*before\s*", re.IGNORECASE)
_AFTER = re.compile(r"\s*after\s*", re.IGNORECASE)

def _count(images: Iterable[PortfolioImage], value: Callable[[PortfolioImage], Optional[object]]) -> List[FilterableAttribute]:
    counts = Counter()
    for image in images:
        key = value(image)
        if key:
            counts[key] += 1
    return [
        FilterableAttribute(id=str(key), label=str(key), count=count)
        for key, count in counts.items()
    ]

def _metadata(field: str) -> Callable[[PortfolioImage], Optional[object]]:
    def value(image: PortfolioImage):
        return getattr(image.metadata, field, None) if image.metadata else None
    return value

def strip_title_word(title: str, pattern: re.Pattern) -> str:
    return pattern.sub("", title or "", count=1).strip()

class PortfolioFilterService:
    def __init__(self, store: PortfolioStore):
        self.store = store

    async def _images_of(self, category: Category) -> List[PortfolioImage]:
        images = await self.store.list_images(category.id)
        return [image.model_copy(update={"category_id": category.id}) for image in images]

    async def _scan(self) -> tuple:
        """Load every category and every image in it.

        Categories whose images fail to load are logged and left out.
        """
        categories = await self.store.list_categories()
        results = await asyncio.gather(
            *(self._images_of(category) for category in categories),
            return_exceptions=True
        )
        all_images: List[PortfolioImage] = []
        for category, result in zip(categories, results):
            if isinstance(result, Exception):
                logger.error(f"Error loading images for category {category.id}: {str(result)}")
                continue
            all_images.extend(result)
        return categories, all_images

    async def get_filterable_attributes(self) -> FilterableAttributes:
        """Count every facet value across the whole portfolio.

        This reads every image of every category on each call.
        """
        try:
            categories, all_images = await self._scan()

            titles = {category.id: category.title for category in categories}
            category_counts = Counter(image.category_id for image in all_images if image.category_id)

            tag_counts = Counter()
            for image in all_images:
                tag_counts.update(tag for tag in image.tags if tag)

            return FilterableAttributes(
                categories=[
                    FilterableAttribute(id=category_id, label=titles.get(category_id, UNKNOWN_CATEGORY), count=count)
                    for category_id, count in category_counts.items()
                ],
                tags=[FilterableAttribute(id=tag, label=tag, count=count) for tag, count in tag_counts.items()],
                cameras=_count(all_images, _metadata("camera")),
                lenses=_count(all_images, _metadata("lens")),
                locations=_count(all_images, _metadata("location")),
                apertures=_count(all_images, _metadata("aperture")),
                shutter_speeds=_count(all_images, _metadata("shutter_speed")),
                iso_values=_count(all_images, _metadata("iso")),
            )
        except Exception as e:
            logger.error(f"Error getting filterable attributes: {str(e)}")
            return FilterableAttributes()

    async def get_filtered_portfolio_images(self, options: Optional[FilterOptions] = None) -> List[PortfolioImage]:
        """Images matching every selected facet, sorted and paginated.

        Image paths are returned as stored; delivery URLs are built by the caller.
        """
        options = options or FilterOptions()
        try:
            return await self.store.query_images(options)
        except Exception as e:
            logger.error(f"Error getting filtered portfolio images: {str(e)}")
            return []

    async def get_related_images(self, image_id: str, category_id: str, limit: int = 8) -> List[PortfolioImage]:
        try:
            source = await self.store.get_image(category_id, image_id)
            if source is None:
                return []

            options = FilterOptions(limit=limit + 1)
            if source.tags:
                options.tags = [source.tags[0]]
            if source.metadata and source.metadata.camera:
                options.cameras = [source.metadata.camera]

            related = await self.get_filtered_portfolio_images(options)
            return [image for image in related if image.id != image_id][:limit]
        except Exception as e:
            logger.error(f"Error getting related images: {str(e)}")
            return []

    async def get_before_after_images(self) -> List[BeforeAfterPair]:
        """Pair images tagged "before" and "after" whose titles match.

        Titles are compared after removing the first "before"/"after" word,
        case-insensitively; images without an exact match are dropped.
        """
        try:
            _, all_images = await self._scan()
            before_images = [image for image in all_images if "before" in image.tags]
            after_images = [image for image in all_images if "after" in image.tags]

            pairs = []
            for before in before_images:
                title = strip_title_word(before.title, _BEFORE)
                after = next(
                    (image for image in after_images if strip_title_word(image.title, _AFTER) == title),
                    None
                )
                if after is not None:
                    pairs.append(BeforeAfterPair(before=before, after=after))
            return pairs
        except Exception as e:
            logger.error(f"Error getting before/after images: {str(e)}")
            return []
