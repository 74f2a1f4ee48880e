from fastapi import Depends
from functools import lru_cache
from app.config import get_settings
from app.database import database
from app.sample_data import SAMPLE_CATEGORIES, SAMPLE_IMAGES
from app.services.cloudinary import CloudinaryUrlBuilder, get_url_builder
from app.services.portfolio import PortfolioFilterService
from app.services.portfolio_store import MemoryPortfolioStore, MongoPortfolioStore, PortfolioStore
import logging

logger = logging.getLogger(__name__)

@lru_cache()
def get_portfolio_store() -> PortfolioStore:
    settings = get_settings()
    if settings.storage_backend == "memory":
        logger.info("Using in-memory portfolio store with sample data")
        return MemoryPortfolioStore(SAMPLE_CATEGORIES, SAMPLE_IMAGES)
    return MongoPortfolioStore(database)

def get_portfolio_service(store: PortfolioStore = Depends(get_portfolio_store)) -> PortfolioFilterService:
    return PortfolioFilterService(store)

def get_delivery_urls() -> CloudinaryUrlBuilder:
    return get_url_builder()
