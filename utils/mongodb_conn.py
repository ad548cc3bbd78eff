import logging
import os
from functools import lru_cache

import dotenv
from motor.motor_asyncio import AsyncIOMotorClient

dotenv.load_dotenv()

logger = logging.getLogger(__name__)


class MongodbConnection:
    mongo_client = None

    def __init__(self):
        self.connect_to_database()

    def close_mongo_client(self):
        if self.mongo_client is not None:
            self.mongo_client.close()
            logger.info("[Mongo] Client closed")

    def get_database(self, database_name=None):
        return self.mongo_client[database_name or os.getenv("MONGODB_DATABASE", "cgpt")]

    def connect_to_database(self):
        mongodb_uri = os.getenv("MONGODB_URI")
        if not mongodb_uri:
            # Build URI from individual settings
            host = os.getenv("MONGODB_HOST", "localhost")
            port = int(os.getenv("MONGODB_PORT", 27017))
            database = os.getenv("MONGODB_DATABASE", "cgpt")
            username = os.getenv("MONGODB_USERNAME", "")
            password = os.getenv("MONGODB_PASSWORD", "")
            auth_source = os.getenv("MONGODB_AUTH_SOURCE", "admin")

            if username and password:
                mongodb_uri = f"mongodb://{username}:{password}@{host}:{port}/{database}?authSource={auth_source}"
            else:
                mongodb_uri = f"mongodb://{host}:{port}/{database}"
        # Motor connects lazily; this does not touch the network
        self.mongo_client = AsyncIOMotorClient(mongodb_uri)
        logger.info("[Mongo] Client created for database %s", os.getenv("MONGODB_DATABASE", "cgpt"))

    async def check_connection(self) -> bool:
        try:
            await self.mongo_client.admin.command("ping")
            return True
        except Exception as e:
            logger.error("[Mongo] Ping failed: %s", e)
            return False


@lru_cache(maxsize=1)
def get_mongodb_connection() -> MongodbConnection:
    return MongodbConnection()
