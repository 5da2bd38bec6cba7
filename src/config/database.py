import logging

from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie
from src.models.cartModel import CartDocument
from src.models.wishlistModel import WishlistDocument
from src.models.savedCartModel import SavedCartDocument
from src.crud.documentStore import DocumentStore
from .settings import settings

logger = logging.getLogger(__name__)


def create_document_store(backend: str = settings.DOCUMENT_STORE) -> DocumentStore:
    if backend == "memory":
        return DocumentStore.in_memory()
    if backend == "mongo":
        return DocumentStore.beanie()
    raise ValueError(f"Unknown DOCUMENT_STORE backend: {backend}")


document_store = create_document_store()


# Call this from within your event loop to get beanie setup.
async def startDB():
    if settings.DOCUMENT_STORE != "mongo":
        logger.info(f"Using {settings.DOCUMENT_STORE} document store, skipping MongoDB setup")
        return

    # Create Motor client
    client = AsyncIOMotorClient(settings.MONGO_URI, uuidRepresentation="standard", tz_aware=True)
    database = client[settings.MONGO_DATABASE]

    # A failed connection is logged only; requests then fail with a store error
    try:
        await init_beanie(database=database,
                          document_models=[CartDocument, WishlistDocument, SavedCartDocument])
        logger.info(f"✓ Cart server connected to database {settings.MONGO_DATABASE}")
    except Exception as e:
        logger.error(f"✗ Database error: {str(e)}", exc_info=True)
