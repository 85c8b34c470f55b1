"""Favorites router - CRUD operations for saved businesses."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from towgo.database import get_db
from towgo.dependencies import get_current_user
from towgo.models.favorites import FavoriteCreateRequest, FavoriteResponse
from towgo.services.favorites_store import FavoriteExistsError, FavoritesStore

router = APIRouter(prefix="/favorites", tags=["favorites"])


def get_store(
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> FavoritesStore:
    return FavoritesStore(db, current_user["id"])


@router.get("", response_model=List[FavoriteResponse])
async def list_favorites(store: FavoritesStore = Depends(get_store)):
    """List all favorites of the current user."""
    return [FavoriteResponse.model_validate(favorite) for favorite in store.list()]


@router.post("", response_model=FavoriteResponse, status_code=status.HTTP_201_CREATED)
async def add_favorite(
    payload: FavoriteCreateRequest,
    store: FavoritesStore = Depends(get_store),
):
    """Save a business as a favorite."""
    try:
        favorite = store.add(payload)
    except FavoriteExistsError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Favorite already exists")
    return FavoriteResponse.model_validate(favorite)


@router.delete("/{place_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_favorite(place_id: str, store: FavoritesStore = Depends(get_store)):
    """Remove a favorite by place id."""
    if not store.remove(place_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Favorite not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
