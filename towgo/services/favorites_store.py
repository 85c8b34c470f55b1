"""Per-user favorites persisted in the relational store."""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from towgo.database import Favorite
from towgo.models.favorites import FavoriteCreateRequest

logger = logging.getLogger(__name__)


class FavoriteExistsError(Exception):
    """The user already saved this place."""


class FavoritesStore:
    """
    CRUD over one user's favorites.

    `is_favorite` answers from the last fetched list; `add` and `remove`
    invalidate it so the next check fetches again.
    """

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id
        self._cache: Optional[List[Favorite]] = None

    def _find(self, place_id: str) -> Optional[Favorite]:
        return (
            self.db.query(Favorite)
            .filter(Favorite.user_id == self.user_id, Favorite.place_id == place_id)
            .first()
        )

    def list(self) -> List[Favorite]:
        favorites = (
            self.db.query(Favorite)
            .filter(Favorite.user_id == self.user_id)
            .order_by(Favorite.id)
            .all()
        )
        self._cache = favorites
        return favorites

    def add(self, business: FavoriteCreateRequest) -> Favorite:
        """
        Save a business for the user.

        Raises:
            FavoriteExistsError: If the place is already saved
        """
        if self._find(business.place_id) is not None:
            raise FavoriteExistsError(business.place_id)

        favorite = Favorite(
            user_id=self.user_id,
            place_id=business.place_id,
            name=business.name,
            address=business.address,
            phone_number=business.phone_number,
            location=business.location.model_dump(),
        )
        self.db.add(favorite)
        self.db.commit()
        self.db.refresh(favorite)
        self._cache = None

        logger.info(f"User {self.user_id} saved favorite {business.place_id}")
        return favorite

    def remove(self, place_id: str) -> bool:
        favorite = self._find(place_id)
        if favorite is None:
            return False

        self.db.delete(favorite)
        self.db.commit()
        self._cache = None

        logger.info(f"User {self.user_id} removed favorite {place_id}")
        return True

    def is_favorite(self, place_id: str) -> bool:
        favorites = self._cache if self._cache is not None else self.list()
        return any(favorite.place_id == place_id for favorite in favorites)
