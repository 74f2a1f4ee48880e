"""
Shared fixtures: a small portfolio with known facet distributions.
"""

from datetime import datetime

import pytest

from app.models import Category, ImageMetadata, PortfolioImage
from app.services.portfolio_store import MemoryPortfolioStore


def make_image(image_id, category_id="weddings", **fields):
    """Build a portfolio image with sensible defaults."""
    metadata = fields.pop("metadata", None)
    defaults = dict(
        title=image_id,
        image_path=f"https://store.example/o/portfolios%2F{category_id}%2F{image_id}.jpg?alt=media",
        width=1200,
        height=800,
        date_created=datetime(2024, 1, 1),
    )
    defaults.update(fields)
    return PortfolioImage(
        id=image_id,
        category_id=category_id,
        metadata=ImageMetadata(**metadata) if metadata else None,
        **defaults
    )


@pytest.fixture
def categories():
    return [
        Category(id="weddings", title="Wedding Photography", slug="wedding-photography", order=1),
        Category(id="portraits", title="Portrait Photography", slug="portrait-photography", order=2),
    ]


@pytest.fixture
def images():
    return [
        make_image("w1", "weddings", order=1, tags=["ceremony", "outdoor"], featured=True,
                   date_created=datetime(2024, 5, 1),
                   metadata={"camera": "Canon R5", "lens": "50mm", "location": "Toronto",
                             "aperture": "f/1.8", "shutter_speed": "1/500", "iso": 200}),
        make_image("w2", "weddings", order=2, tags=["reception"],
                   date_created=datetime(2024, 6, 1),
                   metadata={"camera": "Canon R5", "lens": "35mm", "iso": 3200}),
        make_image("w3", "weddings", order=3, tags=["ceremony"],
                   date_created=datetime(2024, 7, 1),
                   metadata={"camera": "Sony A7", "location": "Ottawa", "iso": 200}),
        make_image("p1", "portraits", order=1, tags=["studio"], featured=True,
                   date_created=datetime(2023, 3, 1),
                   metadata={"camera": "Sony A7", "aperture": "f/4", "shutter_speed": "1/200"}),
        make_image("p2", "portraits", order=2, tags=[],
                   date_created=datetime(2023, 4, 1)),
    ]


@pytest.fixture
def store(categories, images):
    return MemoryPortfolioStore(categories, images)
