from fastapi import APIRouter, Depends, HTTPException, status
from app.models import Category
from app.services.portfolio_store import PortfolioStore
from app.utils.dependencies import get_portfolio_store
from typing import List
import logging

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("", response_model=List[Category])
async def get_categories(store: PortfolioStore = Depends(get_portfolio_store)):
    try:
        return await store.list_categories()
    except Exception as e:
        logger.error(f"Error fetching categories: {str(e)}")
        return []

@router.get("/{slug}", response_model=Category)
async def get_category(slug: str, store: PortfolioStore = Depends(get_portfolio_store)):
    try:
        category = await store.get_category_by_slug(slug)
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error fetching category: {str(e)}"
        )
    if category is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Category not found: {slug}"
        )
    return category
