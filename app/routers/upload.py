import os
import aiofiles
import logging
from fastapi import APIRouter, UploadFile, Form, File, Depends, HTTPException, status
from app.models import ImageMetadata, PortfolioImage
from app.services.cloudinary import CloudinaryPreset, CloudinaryUrlBuilder, delete_from_cloudinary, upload_to_cloudinary
from app.services.portfolio_store import PortfolioStore, new_id
from app.utils.dependencies import get_delivery_urls, get_portfolio_store
from app.utils.security import verify_api_key
from datetime import datetime
from typing import Optional
import tempfile

router = APIRouter(dependencies=[Depends(verify_api_key)])
logger = logging.getLogger(__name__)

ALLOWED_TYPES = ["image/jpeg", "image/png", "image/jpg", "image/webp"]
MAX_UPLOAD_BYTES = 20 * 1024 * 1024

@router.post("", response_model=PortfolioImage, status_code=status.HTTP_201_CREATED)
async def upload_image(
    file: UploadFile = File(...),
    category: str = Form(...),
    title: str = Form(""),
    description: str = Form(""),
    tags: str = Form(""),
    featured: bool = Form(False),
    order: Optional[int] = Form(None),
    camera: Optional[str] = Form(None),
    lens: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    aperture: Optional[str] = Form(None),
    shutter_speed: Optional[str] = Form(None),
    iso: Optional[int] = Form(None),
    focal_length: Optional[str] = Form(None),
    store: PortfolioStore = Depends(get_portfolio_store),
    urls: CloudinaryUrlBuilder = Depends(get_delivery_urls)
):
    if file.content_type not in ALLOWED_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid file type. Only JPG, JPEG, PNG and WEBP are allowed."
        )

    portfolio_category = await store.get_category(category)
    if portfolio_category is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Category not found: {category}"
        )

    content = await file.read()
    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File size exceeds 20 MB limit"
        )

    file_ext = os.path.splitext(file.filename or "")[1]
    with tempfile.NamedTemporaryFile(delete=False, suffix=file_ext) as temp_file:
        temp_file_path = temp_file.name

    try:
        async with aiofiles.open(temp_file_path, "wb") as out:
            await out.write(content)
        upload_result = await upload_to_cloudinary(temp_file_path, folder=f"portfolios/{category}")

        tag_list = [tag.strip() for tag in tags.split(",") if tag.strip()] if tags else []
        default_title = os.path.splitext(file.filename or "")[0]

        image = PortfolioImage(
            id=new_id(),
            category_id=category,
            title=title or default_title,
            description=description,
            image_path=upload_result["url"],
            cloudinary_id=upload_result["public_id"],
            thumbnail_url=urls.get_delivery_url(upload_result["url"], CloudinaryPreset.THUMBNAIL),
            width=upload_result.get("width") or 1,
            height=upload_result.get("height") or 1,
            featured=featured,
            order=order if order is not None else portfolio_category.image_count + 1,
            date_created=datetime.utcnow(),
            tags=tag_list,
            metadata=ImageMetadata(
                camera=camera, lens=lens, location=location, aperture=aperture,
                shutter_speed=shutter_speed, iso=iso, focal_length=focal_length
            ),
        )
        return await store.add_image(image)
    except HTTPException as he:
        raise he
    except Exception as e:
        logger.exception(f"Image upload failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Image upload failed"
        )
    finally:
        if os.path.exists(temp_file_path):
            os.remove(temp_file_path)
            logger.debug(f"Removed temp file: {temp_file_path}")

@router.delete("/{category_id}/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_image(
    category_id: str,
    image_id: str,
    store: PortfolioStore = Depends(get_portfolio_store)
):
    try:
        image = await store.delete_image(category_id, image_id)
    except Exception as e:
        logger.exception(f"Image delete failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Image delete failed"
        )
    if image is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found"
        )
    if image.cloudinary_id and not await delete_from_cloudinary(image.cloudinary_id):
        logger.warning(f"Image {image_id} removed but Cloudinary asset {image.cloudinary_id} was not deleted")
