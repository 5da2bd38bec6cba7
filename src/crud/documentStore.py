from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, Generic, List, Optional, Tuple, Type, TypeVar
import logging

from beanie import Document, PydanticObjectId
from beanie.exceptions import CollectionWasNotInitialized
from bson import ObjectId
from pydantic import BaseModel
from pymongo.errors import PyMongoError

from src.commonUtils.exceptions import StoreFailure
from src.models.cartModel import Cart, CartDocument
from src.models.savedCartModel import SavedCart, SavedCartDocument
from src.models.wishlistModel import Wishlist, WishlistDocument

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# (field, direction) with -1 for descending, 1 for ascending, same as Beanie
SortSpec = Tuple[str, int]


class DocumentCollection(ABC, Generic[ModelT]):
    """One collection of user-owned documents.

    Every document carries ``id`` and ``user_id``. Reads hand out copies, so a
    caller only changes what is stored by calling ``save``.
    """

    @abstractmethod
    async def find_one(self, user_id: str) -> Optional[ModelT]:
        ...

    @abstractmethod
    async def find_by_id(self, document_id: str) -> Optional[ModelT]:
        ...

    @abstractmethod
    async def find_many(self, user_id: str, sort: Optional[SortSpec] = None) -> List[ModelT]:
        ...

    @abstractmethod
    async def save(self, document: ModelT) -> ModelT:
        """Insert or replace ``document``; assigns ``id`` on first save."""

    @abstractmethod
    async def delete(self, document_id: str) -> None:
        ...


@contextmanager
def store_errors():
    try:
        yield
    except (PyMongoError, CollectionWasNotInitialized) as e:
        logger.error(f"Document store error: {str(e)}")
        raise StoreFailure(str(e)) from e


class BeanieCollection(DocumentCollection[ModelT]):
    """Collection backed by a Beanie document class (MongoDB via Motor)"""

    def __init__(self, document_model: Type[Document], model: Type[ModelT]):
        self.document_model = document_model
        self.model = model

    def _to_model(self, document: Optional[Document]) -> Optional[ModelT]:
        if document is None:
            return None
        data = document.model_dump(exclude={"id", "revision_id"})
        return self.model(id=str(document.id), **data)

    async def find_one(self, user_id: str) -> Optional[ModelT]:
        with store_errors():
            document = await self.document_model.find_one({"user_id": user_id})
        return self._to_model(document)

    async def find_by_id(self, document_id: str) -> Optional[ModelT]:
        # A malformed id can never match a stored document
        if not PydanticObjectId.is_valid(document_id):
            return None
        with store_errors():
            document = await self.document_model.get(PydanticObjectId(document_id))
        return self._to_model(document)

    async def find_many(self, user_id: str, sort: Optional[SortSpec] = None) -> List[ModelT]:
        with store_errors():
            query = self.document_model.find({"user_id": user_id})
            if sort:
                query = query.sort(sort)
            documents = await query.to_list()
        return [self._to_model(document) for document in documents]

    async def save(self, document: ModelT) -> ModelT:
        with store_errors():
            mongo_document = self.document_model(**document.model_dump(exclude={"id"}))
            if document.id:
                mongo_document.id = PydanticObjectId(document.id)
            await mongo_document.save()
        document.id = str(mongo_document.id)
        return document

    async def delete(self, document_id: str) -> None:
        if not PydanticObjectId.is_valid(document_id):
            return
        with store_errors():
            document = await self.document_model.get(PydanticObjectId(document_id))
            if document:
                await document.delete()


class InMemoryCollection(DocumentCollection[ModelT]):
    """Process-local collection, used for local runs and by the test suite"""

    def __init__(self):
        self._documents: Dict[str, ModelT] = {}

    async def find_one(self, user_id: str) -> Optional[ModelT]:
        for document in self._documents.values():
            if document.user_id == user_id:
                return document.model_copy(deep=True)
        return None

    async def find_by_id(self, document_id: str) -> Optional[ModelT]:
        document = self._documents.get(document_id)
        return document.model_copy(deep=True) if document else None

    async def find_many(self, user_id: str, sort: Optional[SortSpec] = None) -> List[ModelT]:
        documents = [
            document.model_copy(deep=True)
            for document in self._documents.values()
            if document.user_id == user_id
        ]
        if sort:
            field, direction = sort
            # ObjectIds grow with insertion, so they break timestamp ties
            documents.sort(key=lambda d: (getattr(d, field), d.id), reverse=direction < 0)
        return documents

    async def save(self, document: ModelT) -> ModelT:
        if not document.id:
            document.id = str(ObjectId())
        self._documents[document.id] = document.model_copy(deep=True)
        return document

    async def delete(self, document_id: str) -> None:
        self._documents.pop(document_id, None)


class DocumentStore:
    """The three collections this service persists"""

    def __init__(
            self,
            carts: DocumentCollection[Cart],
            wishlists: DocumentCollection[Wishlist],
            saved_carts: DocumentCollection[SavedCart],
    ):
        self.carts = carts
        self.wishlists = wishlists
        self.saved_carts = saved_carts

    @classmethod
    def beanie(cls) -> "DocumentStore":
        return cls(
            carts=BeanieCollection(CartDocument, Cart),
            wishlists=BeanieCollection(WishlistDocument, Wishlist),
            saved_carts=BeanieCollection(SavedCartDocument, SavedCart),
        )

    @classmethod
    def in_memory(cls) -> "DocumentStore":
        return cls(
            carts=InMemoryCollection(),
            wishlists=InMemoryCollection(),
            saved_carts=InMemoryCollection(),
        )
