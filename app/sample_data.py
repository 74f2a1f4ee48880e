from datetime import datetime
from app.models import Category, ImageMetadata, PortfolioImage

STORAGE_BASE = "https://firebasestorage.googleapis.com/v0/b/portfolio-demo.appspot.com/o"

SAMPLE_CATEGORIES = [
    Category(
        id="wedding-photography",
        title="Wedding Photography",
        description="Capturing special moments on your big day",
        slug="wedding-photography",
        cover_image="/sample-images/wedding-cover.jpg",
        order=1,
        featured=True,
    ),
    Category(
        id="portrait-photography",
        title="Portrait Photography",
        description="Professional portraits for individuals and families",
        slug="portrait-photography",
        cover_image="/sample-images/portrait-cover.jpg",
        order=2,
        featured=True,
    ),
    Category(
        id="event-photography",
        title="Event Photography",
        description="Corporate events, parties, and special occasions",
        slug="event-photography",
        cover_image="/sample-images/event-cover.jpg",
        order=3,
        featured=False,
    ),
]

def _storage_url(path: str) -> str:
    return f"{STORAGE_BASE}/{path.replace('/', '%2F')}?alt=media"

SAMPLE_IMAGES = [
    PortfolioImage(
        id="wedding-first-look",
        category_id="wedding-photography",
        title="First Look",
        image_path=_storage_url("portfolios/wedding-photography/first-look.jpg"),
        width=2400, height=1600,
        featured=True, order=1,
        date_created=datetime(2024, 6, 15, 16, 30),
        tags=["ceremony", "golden-hour"],
        metadata=ImageMetadata(camera="Canon EOS R5", lens="RF 50mm F1.2L", location="Toronto",
                               aperture="f/1.8", shutter_speed="1/500", iso=200, focal_length="50mm"),
    ),
    PortfolioImage(
        id="wedding-reception",
        category_id="wedding-photography",
        title="Reception Toast",
        image_path=_storage_url("portfolios/wedding-photography/reception.jpg"),
        width=2400, height=1600,
        order=2,
        date_created=datetime(2024, 6, 15, 21, 5),
        tags=["reception"],
        metadata=ImageMetadata(camera="Canon EOS R5", lens="RF 28-70mm F2L", location="Toronto",
                               aperture="f/2", shutter_speed="1/160", iso=3200),
    ),
    PortfolioImage(
        id="portrait-studio-before",
        category_id="portrait-photography",
        title="Studio Portrait Before",
        image_path=_storage_url("portfolios/portrait-photography/studio-before.jpg"),
        width=1600, height=2400,
        order=1,
        date_created=datetime(2024, 3, 2, 11, 0),
        tags=["before", "studio"],
        metadata=ImageMetadata(camera="Sony A7 IV", lens="FE 85mm F1.4 GM", aperture="f/4",
                               shutter_speed="1/200", iso=100),
    ),
    PortfolioImage(
        id="portrait-studio-after",
        category_id="portrait-photography",
        title="Studio Portrait After",
        image_path=_storage_url("portfolios/portrait-photography/studio-after.jpg"),
        width=1600, height=2400,
        featured=True, order=2,
        date_created=datetime(2024, 3, 2, 11, 0),
        tags=["after", "studio"],
        metadata=ImageMetadata(camera="Sony A7 IV", lens="FE 85mm F1.4 GM", aperture="f/4",
                               shutter_speed="1/200", iso=100),
    ),
    PortfolioImage(
        id="event-keynote",
        category_id="event-photography",
        title="Keynote",
        image_path="https://images.example.com/events/keynote.jpg",
        width=3000, height=2000,
        order=1,
        date_created=datetime(2023, 11, 8, 9, 45),
        tags=["corporate"],
        metadata=ImageMetadata(camera="Canon EOS R5", lens="RF 70-200mm F2.8L", location="Ottawa",
                               aperture="f/2.8", shutter_speed="1/250", iso=1600),
    ),
]
