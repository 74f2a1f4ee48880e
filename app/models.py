from datetime import datetime, timezone
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Literal, Optional

DEFAULT_PAGE_SIZE = 50

SortField = Literal["date_created", "title", "featured", "order"]
SortDirection = Literal["asc", "desc"]

def as_naive_utc(value: datetime) -> datetime:
    """Stored timestamps are naive UTC; convert aware input to match"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value

class Category(BaseModel):
    id: str = Field(..., description="Unique identifier for the category")
    title: str = Field(..., description="Human-readable name of the category")
    description: str = ""
    slug: str = Field(..., description="Unique, URL-safe name")
    cover_image: str = ""
    order: int = Field(0, description="Display sequence")
    featured: bool = False
    image_count: int = Field(0, ge=0, description="Number of images in the category")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @field_validator("created_at", "updated_at")
    @classmethod
    def parse_timestamps(cls, v):
        return as_naive_utc(v)

class ImageMetadata(BaseModel):
    camera: Optional[str] = None
    lens: Optional[str] = None
    location: Optional[str] = None
    aperture: Optional[str] = None
    shutter_speed: Optional[str] = None
    iso: Optional[int] = None
    focal_length: Optional[str] = None

class PortfolioImage(BaseModel):
    id: str = Field(..., description="Image identifier")
    category_id: Optional[str] = Field(None, description="Category ID the image belongs to")
    title: str = ""
    description: str = ""
    image_path: str = Field(..., description="Storage URL of the original image")
    thumbnail_url: Optional[str] = None
    cloudinary_id: Optional[str] = Field(None, description="Cloudinary public ID, for uploaded assets")
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    featured: bool = False
    order: int = 0
    date_created: datetime = Field(default_factory=datetime.utcnow)
    tags: List[str] = Field(default=[], description="List of tags for the image")
    metadata: Optional[ImageMetadata] = None

    @field_validator("date_created")
    @classmethod
    def parse_date_created(cls, v):
        return as_naive_utc(v)

class DeliveredImage(PortfolioImage):
    """A portfolio image with CDN delivery URLs resolved for rendering"""
    delivery_url: str = ""
    placeholder_url: str = ""
    src_set: str = ""

class FilterableAttribute(BaseModel):
    id: str
    label: str
    count: int

class FilterableAttributes(BaseModel):
    categories: List[FilterableAttribute] = []
    tags: List[FilterableAttribute] = []
    cameras: List[FilterableAttribute] = []
    lenses: List[FilterableAttribute] = []
    locations: List[FilterableAttribute] = []
    apertures: List[FilterableAttribute] = []
    shutter_speeds: List[FilterableAttribute] = []
    iso_values: List[FilterableAttribute] = []

class DateRange(BaseModel):
    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def parse_bounds(cls, v):
        return as_naive_utc(v)

    @model_validator(mode='after')
    def check_order(self):
        if self.start > self.end:
            raise ValueError("date_range.start must not be after date_range.end")
        return self

class FilterOptions(BaseModel):
    """Query descriptor for portfolio images.

    A facet that is None or an empty list places no restriction on the
    result. Facets combine with AND; values inside one facet combine with OR.
    """
    categories: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    cameras: Optional[List[str]] = None
    lenses: Optional[List[str]] = None
    locations: Optional[List[str]] = None
    apertures: Optional[List[str]] = None
    shutter_speeds: Optional[List[str]] = None
    iso_values: Optional[List[int]] = None
    date_range: Optional[DateRange] = None
    featured: Optional[bool] = None
    sort_by: SortField = "order"
    sort_direction: SortDirection = "asc"
    limit: int = Field(DEFAULT_PAGE_SIZE, ge=1)
    start_after: Optional[str] = Field(None, description="ID of the last image of the previous page")

class BeforeAfterPair(BaseModel):
    before: PortfolioImage
    after: PortfolioImage

class DeliveredPair(BaseModel):
    before: DeliveredImage
    after: DeliveredImage
