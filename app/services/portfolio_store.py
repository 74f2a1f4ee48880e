"""
Storage backends for portfolio categories and images.

Every image lives in one ``images`` collection keyed by its own ID and
carrying an explicit ``category_id``; filtering across categories is an
ordinary predicate on that field. Stores raise on transport errors and
leave fail-soft handling to the services built on top of them.
"""
import re
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple
from pymongo import ASCENDING, DESCENDING
from app.models import Category, FilterOptions, PortfolioImage
import logging

logger = logging.getLogger(__name__)

# FilterOptions facet -> dotted image field holding the value
FACET_FIELDS = {
    "cameras": "metadata.camera",
    "lenses": "metadata.lens",
    "locations": "metadata.location",
    "apertures": "metadata.aperture",
    "shutter_speeds": "metadata.shutter_speed",
    "iso_values": "metadata.iso",
}

def generate_slug(title: str) -> str:
    """Convert a title to a URL-friendly slug"""
    slug = re.sub(r"[^\w ]+", "", title.lower())
    return re.sub(r" +", "-", slug)

def new_id() -> str:
    return uuid.uuid4().hex

class PortfolioStore(ABC):
    @abstractmethod
    async def list_categories(self) -> List[Category]:
        """All categories in display order"""

    @abstractmethod
    async def get_category(self, category_id: str) -> Optional[Category]:
        ...

    @abstractmethod
    async def get_category_by_slug(self, slug: str) -> Optional[Category]:
        ...

    @abstractmethod
    async def list_images(self, category_id: str) -> List[PortfolioImage]:
        """Images of one category in display order, tagged with its ID"""

    @abstractmethod
    async def get_image(self, category_id: str, image_id: str) -> Optional[PortfolioImage]:
        ...

    @abstractmethod
    async def query_images(self, options: FilterOptions) -> List[PortfolioImage]:
        """Run one filtered, sorted and paginated read across all categories"""

    @abstractmethod
    async def add_category(self, category: Category) -> Category:
        ...

    @abstractmethod
    async def add_image(self, image: PortfolioImage) -> PortfolioImage:
        """Store an image and refresh its category's image count"""

    @abstractmethod
    async def delete_image(self, category_id: str, image_id: str) -> Optional[PortfolioImage]:
        """Remove an image and refresh its category's image count.

        Returns the removed image, or None when it did not exist.
        """

# ---- In-memory backend ----

def _field_value(image: PortfolioImage, dotted: str) -> Any:
    value: Any = image
    for part in dotted.split("."):
        if value is None:
            return None
        value = getattr(value, part, None)
    return value

def matches_filters(image: PortfolioImage, options: FilterOptions) -> bool:
    if options.categories and image.category_id not in options.categories:
        return False
    if options.tags and not set(image.tags).intersection(options.tags):
        return False
    for facet, field in FACET_FIELDS.items():
        selected = getattr(options, facet)
        if selected and _field_value(image, field) not in selected:
            return False
    if options.date_range is not None:
        if not options.date_range.start <= image.date_created <= options.date_range.end:
            return False
    if options.featured is not None and image.featured != options.featured:
        return False
    return True

def sort_key(image: PortfolioImage, sort_by: str) -> Tuple[Any, str]:
    return (getattr(image, sort_by), image.id)

def page_after(
    images: List[PortfolioImage],
    cursor: Optional[PortfolioImage],
    options: FilterOptions,
) -> List[PortfolioImage]:
    """Sort images and keep the ones that follow the cursor image.

    Ties on the sort field are broken by image ID so that pages neither
    overlap nor leave gaps.
    """
    descending = options.sort_direction == "desc"
    ordered = sorted(images, key=lambda img: sort_key(img, options.sort_by), reverse=descending)
    if cursor is not None:
        after = sort_key(cursor, options.sort_by)
        if descending:
            ordered = [img for img in ordered if sort_key(img, options.sort_by) < after]
        else:
            ordered = [img for img in ordered if sort_key(img, options.sort_by) > after]
    return ordered[:options.limit]

class MemoryPortfolioStore(PortfolioStore):
    def __init__(self, categories: Iterable[Category] = (), images: Iterable[PortfolioImage] = ()):
        self.categories: Dict[str, Category] = {}
        self.images: Dict[str, PortfolioImage] = {}
        for category in categories:
            self.categories[category.id] = category.model_copy(deep=True)
        for image in images:
            self.images[image.id] = image.model_copy(deep=True)
        for category_id in self.categories:
            self._refresh_count(category_id)

    def _refresh_count(self, category_id: str) -> None:
        category = self.categories.get(category_id)
        if category is None:
            return
        category.image_count = sum(1 for img in self.images.values() if img.category_id == category_id)
        category.updated_at = datetime.utcnow()

    async def list_categories(self) -> List[Category]:
        return [c.model_copy(deep=True) for c in sorted(self.categories.values(), key=lambda c: (c.order, c.id))]

    async def get_category(self, category_id: str) -> Optional[Category]:
        category = self.categories.get(category_id)
        return category.model_copy(deep=True) if category else None

    async def get_category_by_slug(self, slug: str) -> Optional[Category]:
        category = next((c for c in self.categories.values() if c.slug == slug), None)
        return category.model_copy(deep=True) if category else None

    async def list_images(self, category_id: str) -> List[PortfolioImage]:
        images = [img for img in self.images.values() if img.category_id == category_id]
        return [img.model_copy(deep=True) for img in sorted(images, key=lambda img: (img.order, img.id))]

    async def get_image(self, category_id: str, image_id: str) -> Optional[PortfolioImage]:
        image = self.images.get(image_id)
        if image is None or image.category_id != category_id:
            return None
        return image.model_copy(deep=True)

    async def query_images(self, options: FilterOptions) -> List[PortfolioImage]:
        cursor = self.images.get(options.start_after) if options.start_after else None
        matched = [img for img in self.images.values() if matches_filters(img, options)]
        return [img.model_copy(deep=True) for img in page_after(matched, cursor, options)]

    async def add_category(self, category: Category) -> Category:
        self.categories[category.id] = category.model_copy(deep=True)
        self._refresh_count(category.id)
        return self.categories[category.id].model_copy(deep=True)

    async def add_image(self, image: PortfolioImage) -> PortfolioImage:
        self.images[image.id] = image.model_copy(deep=True)
        self._refresh_count(image.category_id)
        return image.model_copy(deep=True)

    async def delete_image(self, category_id: str, image_id: str) -> Optional[PortfolioImage]:
        image = await self.get_image(category_id, image_id)
        if image is None:
            return None
        del self.images[image_id]
        self._refresh_count(category_id)
        return image

# ---- MongoDB backend ----

def build_image_query(options: FilterOptions) -> Dict[str, Any]:
    """Translate filter options into a MongoDB filter document"""
    query: Dict[str, Any] = {}
    if options.categories:
        query["category_id"] = {"$in": options.categories}
    if options.tags:
        query["tags"] = {"$in": options.tags}
    for facet, field in FACET_FIELDS.items():
        selected = getattr(options, facet)
        if selected:
            query[field] = {"$in": selected}
    if options.date_range is not None:
        query["date_created"] = {
            "$gte": options.date_range.start,
            "$lte": options.date_range.end,
        }
    if options.featured is not None:
        query["featured"] = options.featured
    return query

def build_cursor_query(query: Dict[str, Any], cursor_doc: Dict[str, Any], options: FilterOptions) -> Dict[str, Any]:
    """Restrict a query to documents sorted after the cursor document"""
    op = "$lt" if options.sort_direction == "desc" else "$gt"
    field = options.sort_by
    value = cursor_doc.get(field)
    after = {"$or": [
        {field: {op: value}},
        {field: value, "_id": {op: cursor_doc["_id"]}},
    ]}
    if not query:
        return after
    return {"$and": [query, after]}

def _image_from_doc(doc: Dict[str, Any]) -> PortfolioImage:
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return PortfolioImage(**doc)

def _category_from_doc(doc: Dict[str, Any]) -> Category:
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return Category(**doc)

class MongoPortfolioStore(PortfolioStore):
    def __init__(self, database):
        self.database = database

    @property
    def db(self):
        return self.database.db

    async def list_categories(self) -> List[Category]:
        categories = []
        cursor = self.db.categories.find({}).sort([("order", ASCENDING), ("_id", ASCENDING)])
        async for doc in cursor:
            categories.append(_category_from_doc(doc))
        return categories

    async def get_category(self, category_id: str) -> Optional[Category]:
        doc = await self.db.categories.find_one({"_id": category_id})
        return _category_from_doc(doc) if doc else None

    async def get_category_by_slug(self, slug: str) -> Optional[Category]:
        doc = await self.db.categories.find_one({"slug": slug})
        return _category_from_doc(doc) if doc else None

    async def list_images(self, category_id: str) -> List[PortfolioImage]:
        images = []
        cursor = self.db.images.find({"category_id": category_id}).sort([("order", ASCENDING), ("_id", ASCENDING)])
        async for doc in cursor:
            images.append(_image_from_doc(doc))
        return images

    async def get_image(self, category_id: str, image_id: str) -> Optional[PortfolioImage]:
        doc = await self.db.images.find_one({"_id": image_id, "category_id": category_id})
        return _image_from_doc(doc) if doc else None

    async def query_images(self, options: FilterOptions) -> List[PortfolioImage]:
        query = build_image_query(options)
        if options.start_after:
            cursor_doc = await self.db.images.find_one({"_id": options.start_after})
            if cursor_doc:
                query = build_cursor_query(query, cursor_doc, options)
            else:
                logger.warning(f"Pagination cursor {options.start_after} not found, starting from the beginning")

        direction = DESCENDING if options.sort_direction == "desc" else ASCENDING
        cursor = (
            self.db.images.find(query)
            .sort([(options.sort_by, direction), ("_id", direction)])
            .limit(options.limit)
        )
        images = []
        async for doc in cursor:
            images.append(_image_from_doc(doc))
        return images

    async def _refresh_count(self, category_id: str) -> None:
        count = await self.db.images.count_documents({"category_id": category_id})
        await self.db.categories.update_one(
            {"_id": category_id},
            {"$set": {"image_count": count, "updated_at": datetime.utcnow()}}
        )

    async def add_category(self, category: Category) -> Category:
        doc = category.model_dump(exclude={"id"})
        doc["_id"] = category.id
        await self.db.categories.insert_one(doc)
        await self._refresh_count(category.id)
        return category

    async def add_image(self, image: PortfolioImage) -> PortfolioImage:
        doc = image.model_dump(exclude={"id"})
        doc["_id"] = image.id
        await self.db.images.insert_one(doc)
        await self._refresh_count(image.category_id)
        return image

    async def delete_image(self, category_id: str, image_id: str) -> Optional[PortfolioImage]:
        image = await self.get_image(category_id, image_id)
        if image is None:
            return None
        await self.db.images.delete_one({"_id": image_id, "category_id": category_id})
        await self._refresh_count(category_id)
        return image
