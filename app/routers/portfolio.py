from fastapi import APIRouter, Depends, Query
from app.models import DeliveredImage, DeliveredPair, FilterableAttributes, FilterOptions, PortfolioImage
from app.services.cloudinary import CloudinaryPreset, CloudinaryUrlBuilder
from app.services.portfolio import PortfolioFilterService
from app.utils.dependencies import get_delivery_urls, get_portfolio_service
from typing import List, Optional

router = APIRouter()

def with_delivery_urls(image: PortfolioImage, urls: CloudinaryUrlBuilder) -> DeliveredImage:
    return DeliveredImage(
        **image.model_dump(exclude={"thumbnail_url"}),
        thumbnail_url=image.thumbnail_url or urls.get_delivery_url(image.image_path, CloudinaryPreset.THUMBNAIL),
        delivery_url=urls.get_delivery_url(image.image_path),
        placeholder_url=urls.blur_placeholder(image.image_path),
        src_set=urls.responsive_src_set(image.image_path),
    )

@router.get("/attributes", response_model=FilterableAttributes)
async def get_attributes(service: PortfolioFilterService = Depends(get_portfolio_service)):
    return await service.get_filterable_attributes()

@router.post("/images/search", response_model=List[DeliveredImage])
async def search_images(
    options: Optional[FilterOptions] = None,
    service: PortfolioFilterService = Depends(get_portfolio_service),
    urls: CloudinaryUrlBuilder = Depends(get_delivery_urls)
):
    images = await service.get_filtered_portfolio_images(options)
    return [with_delivery_urls(image, urls) for image in images]

@router.get("/images/{category_id}/{image_id}/related", response_model=List[DeliveredImage])
async def get_related(
    category_id: str,
    image_id: str,
    limit: int = Query(8, ge=1, le=50),
    service: PortfolioFilterService = Depends(get_portfolio_service),
    urls: CloudinaryUrlBuilder = Depends(get_delivery_urls)
):
    images = await service.get_related_images(image_id, category_id, limit)
    return [with_delivery_urls(image, urls) for image in images]

@router.get("/before-after", response_model=List[DeliveredPair])
async def get_before_after(
    service: PortfolioFilterService = Depends(get_portfolio_service),
    urls: CloudinaryUrlBuilder = Depends(get_delivery_urls)
):
    pairs = await service.get_before_after_images()
    return [
        DeliveredPair(before=with_delivery_urls(pair.before, urls), after=with_delivery_urls(pair.after, urls))
        for pair in pairs
    ]
