"""Location sharing routes."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from towgo.dependencies import get_location_share_service
from towgo.models.location_share import LocationShareCreated, LocationShareRequest
from towgo.search.location_sharing import LocationShareService, ShareExpiredError, apply_privacy

router = APIRouter(tags=["location-sharing"])
logger = logging.getLogger(__name__)


@router.post("/location-share", response_model=LocationShareCreated, status_code=status.HTTP_201_CREATED)
async def create_location_share(
    payload: LocationShareRequest,
    shares: LocationShareService = Depends(get_location_share_service),
):
    """Share the user's location until `expires`."""
    try:
        share_id = shares.create(payload)
    except ShareExpiredError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RuntimeError as e:
        logger.error(f"Error creating location share: {e}")
        raise HTTPException(status_code=503, detail="Failed to create location share")

    return LocationShareCreated(share_id=share_id, expires_at=payload.expires)


@router.get("/location-share/{share_id}", response_model=LocationShareRequest)
async def get_location_share(
    share_id: str,
    shares: LocationShareService = Depends(get_location_share_service),
):
    """A share, reduced to the accuracy the sharer chose."""
    share = shares.get(share_id)
    if share is None:
        raise HTTPException(status_code=404, detail="Location share not found or expired")
    return apply_privacy(share, share.accuracy)


@router.delete("/location-share/{share_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_location_share(
    share_id: str,
    shares: LocationShareService = Depends(get_location_share_service),
):
    """Revoke a share before it expires."""
    if not shares.delete(share_id):
        raise HTTPException(status_code=404, detail="Location share not found or already deleted")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/location-shares")
async def list_location_shares(shares: LocationShareService = Depends(get_location_share_service)):
    """All active shares (admin view)."""
    active = shares.active()
    return {
        "count": len(active),
        "shares": [
            {"id": item["id"], "data": item["data"].model_dump(mode="json", by_alias=True)}
            for item in active
        ],
    }
