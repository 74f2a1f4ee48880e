from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING
from app.config import get_settings
from app.sample_data import SAMPLE_CATEGORIES
import logging
from pymongo.errors import ConfigurationError

logger = logging.getLogger(__name__)
settings = get_settings()

class Database:
    def __init__(self):
        self.client = None
        self.db = None

    async def connect(self):
        try:
            self.client = AsyncIOMotorClient(settings.mongodb_url)

            # Extract database name from URL or use default
            if '/' in settings.mongodb_url:
                db_name = settings.mongodb_url.split('/')[-1].split('?')[0]
            else:
                db_name = "portfolio"

            if not db_name:
                db_name = "portfolio"

            self.db = self.client[db_name]
            logger.info(f"Connected to MongoDB database: {db_name}")

            await self._ensure_indexes()
            await self._seed_initial_data()
        except ConfigurationError as ce:
            logger.error(f"Configuration error: {str(ce)}")
            raise
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {str(e)}")
            raise

    async def close(self):
        if self.client:
            self.client.close()
            logger.info("MongoDB connection closed")

    async def _ensure_indexes(self):
        try:
            await self.db.categories.create_index("slug", unique=True)
            await self.db.categories.create_index("order")
            await self.db.images.create_index([("category_id", ASCENDING), ("order", ASCENDING)])
            await self.db.images.create_index("tags")
            await self.db.images.create_index("date_created")
            await self.db.images.create_index("metadata.camera")
            logger.info("Database indexes created")
        except Exception as e:
            logger.error(f"Failed to create indexes: {str(e)}")

    async def _seed_initial_data(self):
        try:
            for category in SAMPLE_CATEGORIES:
                doc = category.model_dump(exclude={"id", "image_count"})
                await self.db.categories.update_one(
                    {"_id": category.id},
                    {"$setOnInsert": {**doc, "image_count": 0}},
                    upsert=True
                )
            logger.info("Seeded initial categories")
        except Exception as e:
            logger.error(f"Failed to seed initial data: {str(e)}")

# Database instance to be imported
database = Database()
