from pymongo import MongoClient
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError
from glow_wizard.core.config import settings
import logging
import certifi

logger = logging.getLogger(__name__)

class Database:
    client: MongoClient = None
    database = None

db = Database()

def _extract_database_name(url: str, default_name: str) -> str:
    """Extract database name from MongoDB URL or use default"""
    url_without_params = url.split("?")[0]
    parts = url_without_params.split("/")
    if len(parts) > 3 and parts[-1] and parts[-1] != "test":
        return parts[-1]
    return default_name

def get_database():
    """Get database instance"""
    return db.database

def connect_to_mongo():
    """Create database connection"""
    try:
        if "mongodb+srv://" in settings.MONGODB_URL:
            logger.info("Detected MongoDB Atlas connection")
            db.client = MongoClient(
                settings.MONGODB_URL,
                serverSelectionTimeoutMS=15000,
                connectTimeoutMS=30000,
                socketTimeoutMS=30000,
                maxPoolSize=50,
                w='majority',
                tls=True,
                tlsCAFile=certifi.where(),
            )
        else:
            logger.info("Detected local MongoDB connection")
            db.client = MongoClient(
                settings.MONGODB_URL,
                serverSelectionTimeoutMS=5000,
                connectTimeoutMS=10000,
                socketTimeoutMS=10000,
                maxPoolSize=20,
            )

        database_name = _extract_database_name(settings.MONGODB_URL, settings.DATABASE_NAME)
        logger.info(f"Using database: {database_name}")
        db.database = db.client[database_name]

        db.client.admin.command('ping', maxTimeMS=5000)
        logger.info("Connected to MongoDB successfully")

    except (ConnectionFailure, ServerSelectionTimeoutError) as e:
        # Profile storage is optional for the recommendation flow
        logger.warning(f"MongoDB unavailable, profile storage disabled: {e}")

def close_mongo_connection():
    """Close database connection"""
    if db.client:
        db.client.close()
        db.client = None
        db.database = None
        logger.info("Disconnected from MongoDB")
