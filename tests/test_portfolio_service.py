"""
Tests for facet aggregation, filtered search, related images and before/after pairing.
"""

import asyncio
from collections import Counter

import pytest

from app.models import Category, FilterableAttributes, FilterOptions
from app.services.portfolio import UNKNOWN_CATEGORY, PortfolioFilterService
from app.services.portfolio_store import MemoryPortfolioStore
from conftest import make_image


def as_counts(attributes):
    return {attribute.id: attribute.count for attribute in attributes}


class FailingStore(MemoryPortfolioStore):
    """Store whose reads fail for selected operations."""

    def __init__(self, *args, fail_categories=(), fail_listing=False, fail_queries=False, **kwargs):
        super().__init__(*args, **kwargs)
        self.fail_categories = set(fail_categories)
        self.fail_listing = fail_listing
        self.fail_queries = fail_queries

    async def list_categories(self):
        if self.fail_listing:
            raise ConnectionError("backend unavailable")
        return await super().list_categories()

    async def list_images(self, category_id):
        if category_id in self.fail_categories:
            raise PermissionError(f"cannot read {category_id}")
        return await super().list_images(category_id)

    async def query_images(self, options):
        if self.fail_queries:
            raise TimeoutError("query timed out")
        return await super().query_images(options)


class TestFilterableAttributes:

    def test_counts_match_ground_truth(self, store, images):
        attributes = asyncio.run(PortfolioFilterService(store).get_filterable_attributes())

        assert as_counts(attributes.categories) == {"weddings": 3, "portraits": 2}
        assert sum(a.count for a in attributes.categories) == len(images)
        assert as_counts(attributes.tags) == dict(Counter(tag for image in images for tag in image.tags))
        assert as_counts(attributes.cameras) == {"Canon R5": 2, "Sony A7": 2}
        assert as_counts(attributes.lenses) == {"50mm": 1, "35mm": 1}
        assert as_counts(attributes.locations) == {"Toronto": 1, "Ottawa": 1}
        assert as_counts(attributes.apertures) == {"f/1.8": 1, "f/4": 1}
        assert as_counts(attributes.shutter_speeds) == {"1/500": 1, "1/200": 1}
        assert as_counts(attributes.iso_values) == {"200": 2, "3200": 1}

    def test_category_labels_are_titles(self, store):
        attributes = asyncio.run(PortfolioFilterService(store).get_filterable_attributes())
        labels = {a.id: a.label for a in attributes.categories}
        assert labels == {"weddings": "Wedding Photography", "portraits": "Portrait Photography"}

    def test_raw_values_are_labels(self, store):
        attributes = asyncio.run(PortfolioFilterService(store).get_filterable_attributes())
        assert all(a.id == a.label for a in attributes.cameras + attributes.tags + attributes.iso_values)

    def test_unknown_category_label(self, categories):
        class MislabelledStore(MemoryPortfolioStore):
            async def list_categories(self):
                return [Category(id="weddings", title="Wedding Photography", slug="w")]

        store = MislabelledStore(categories, [make_image("w1", "weddings")])
        service = PortfolioFilterService(store)
        service._images_of = _tag_with("orphan", service._images_of)
        attributes = asyncio.run(service.get_filterable_attributes())
        assert attributes.categories[0].label == UNKNOWN_CATEGORY

    def test_images_are_tagged_with_source_category(self, categories):
        untagged = make_image("x1", "weddings").model_copy(update={"category_id": None})

        class UntaggedStore(MemoryPortfolioStore):
            async def list_images(self, category_id):
                return [untagged] if category_id == "weddings" else []

        attributes = asyncio.run(PortfolioFilterService(UntaggedStore(categories)).get_filterable_attributes())
        assert as_counts(attributes.categories) == {"weddings": 1}

    def test_failing_category_is_skipped(self, categories, images):
        store = FailingStore(categories, images, fail_categories={"portraits"})
        attributes = asyncio.run(PortfolioFilterService(store).get_filterable_attributes())
        assert as_counts(attributes.categories) == {"weddings": 3}
        assert "studio" not in as_counts(attributes.tags)

    def test_total_failure_returns_empty_facets(self, categories, images):
        store = FailingStore(categories, images, fail_listing=True)
        attributes = asyncio.run(PortfolioFilterService(store).get_filterable_attributes())
        assert attributes == FilterableAttributes()
        for facet in ("categories", "tags", "cameras", "lenses", "locations",
                      "apertures", "shutter_speeds", "iso_values"):
            assert getattr(attributes, facet) == []

    def test_zero_iso_is_not_counted(self, categories):
        store = MemoryPortfolioStore(categories, [make_image("z", metadata={"iso": 0, "camera": ""})])
        attributes = asyncio.run(PortfolioFilterService(store).get_filterable_attributes())
        assert attributes.iso_values == []
        assert attributes.cameras == []


def _tag_with(category_id, images_of):
    async def wrapper(category):
        images = await images_of(category)
        return [image.model_copy(update={"category_id": category_id}) for image in images]
    return wrapper


class TestFilteredImages:

    def test_delegates_to_store(self, store):
        service = PortfolioFilterService(store)
        result = asyncio.run(service.get_filtered_portfolio_images(FilterOptions(cameras=["Sony A7"])))
        assert sorted(image.id for image in result) == ["p1", "w3"]

    def test_default_options(self, store):
        result = asyncio.run(PortfolioFilterService(store).get_filtered_portfolio_images())
        assert len(result) == 5

    def test_image_paths_are_not_transformed(self, store, images):
        result = asyncio.run(PortfolioFilterService(store).get_filtered_portfolio_images())
        assert {image.image_path for image in result} == {image.image_path for image in images}

    def test_query_failure_returns_empty_list(self, categories, images):
        store = FailingStore(categories, images, fail_queries=True)
        assert asyncio.run(PortfolioFilterService(store).get_filtered_portfolio_images()) == []


class TestRelatedImages:

    def test_requires_first_tag_and_camera(self, store):
        related = asyncio.run(PortfolioFilterService(store).get_related_images("w1", "weddings"))
        # w3 shares the "ceremony" tag but was shot on another camera
        assert [image.id for image in related] == []

    def test_source_image_is_excluded(self, categories):
        store = MemoryPortfolioStore(categories, [
            make_image("a", order=1, tags=["beach"], metadata={"camera": "X"}),
            make_image("b", order=2, tags=["beach", "sunset"], metadata={"camera": "X"}),
            make_image("c", order=3, tags=["beach"], metadata={"camera": "Y"}),
        ])
        related = asyncio.run(PortfolioFilterService(store).get_related_images("a", "weddings"))
        assert [image.id for image in related] == ["b"]

    def test_limit_is_respected(self, categories):
        store = MemoryPortfolioStore(categories, [
            make_image(f"i{n}", order=n, tags=["beach"]) for n in range(6)
        ])
        related = asyncio.run(PortfolioFilterService(store).get_related_images("i5", "weddings", limit=3))
        assert [image.id for image in related] == ["i0", "i1", "i2"]

    def test_unknown_image_returns_empty_list(self, store):
        assert asyncio.run(PortfolioFilterService(store).get_related_images("nope", "weddings")) == []

    def test_wrong_category_returns_empty_list(self, store):
        assert asyncio.run(PortfolioFilterService(store).get_related_images("w1", "portraits")) == []


class TestBeforeAfter:

    @pytest.fixture
    def renovation_store(self, categories):
        return MemoryPortfolioStore(categories, [
            make_image("k1", "weddings", title="Kitchen Before", tags=["before"]),
            make_image("k2", "portraits", title="Kitchen After", tags=["after"]),
            make_image("b1", "weddings", title="Bathroom Before", tags=["before"]),
            make_image("l2", "weddings", title="Living Room After", tags=["after"]),
        ])

    def test_matching_titles_pair_up(self, renovation_store):
        pairs = asyncio.run(PortfolioFilterService(renovation_store).get_before_after_images())
        assert [(pair.before.id, pair.after.id) for pair in pairs] == [("k1", "k2")]

    def test_unmatched_images_are_dropped(self, renovation_store):
        pairs = asyncio.run(PortfolioFilterService(renovation_store).get_before_after_images())
        paired = {pair.before.id for pair in pairs} | {pair.after.id for pair in pairs}
        assert "b1" not in paired
        assert "l2" not in paired

    def test_matching_is_case_insensitive(self, categories):
        store = MemoryPortfolioStore(categories, [
            make_image("a", title="BEFORE Porch", tags=["before"]),
            make_image("b", title="after porch", tags=["after"]),
            make_image("c", title="after Porch", tags=["after"]),
        ])
        pairs = asyncio.run(PortfolioFilterService(store).get_before_after_images())
        assert [(pair.before.id, pair.after.id) for pair in pairs] == [("a", "c")]

    def test_tag_is_required(self, categories):
        store = MemoryPortfolioStore(categories, [
            make_image("a", title="Deck Before", tags=[]),
            make_image("b", title="Deck After", tags=["after"]),
        ])
        assert asyncio.run(PortfolioFilterService(store).get_before_after_images()) == []

    def test_store_failure_returns_empty_list(self, categories):
        store = FailingStore(categories, [], fail_listing=True)
        assert asyncio.run(PortfolioFilterService(store).get_before_after_images()) == []
