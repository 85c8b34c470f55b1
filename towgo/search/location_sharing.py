"""
Location sharing backed by Redis.
Shares expire on their own through the key TTL.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from towgo.config import Settings, settings as default_settings
from towgo.models.location_share import LocationShareRequest, ShareAccuracy
from towgo.models.search import LatLng
from towgo.services.redis_client import RedisClient

logger = logging.getLogger(__name__)

KEY_PREFIX = "location-share:"


class ShareExpiredError(ValueError):
    """The requested expiry is already in the past."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def apply_privacy(share: LocationShareRequest, accuracy: ShareAccuracy) -> LocationShareRequest:
    """
    Reduce what a share reveals.

    approximate: coordinates rounded to two decimals (roughly a kilometre).
    city: coordinates dropped, only the first address component kept.
    """
    if accuracy == ShareAccuracy.APPROXIMATE and share.location is not None:
        return share.model_copy(update={
            "location": LatLng(lat=round(share.location.lat, 2), lng=round(share.location.lng, 2)),
        })
    if accuracy == ShareAccuracy.CITY:
        return share.model_copy(update={
            "location": None,
            "address": share.address.split(",")[0].strip(),
        })
    return share


class LocationShareService:
    """Create, read and revoke temporary location shares."""

    def __init__(self, store: RedisClient, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or default_settings

    def create(self, share: LocationShareRequest) -> str:
        """
        Store a share until its expiry.

        Raises:
            ShareExpiredError: If `share.expires` is not in the future
        """
        remaining = (_aware(share.expires) - _utcnow()).total_seconds()
        if remaining <= 0:
            raise ShareExpiredError("Share expiry must be in the future")

        ttl = max(1, min(int(remaining), self.settings.location_share_max_ttl_seconds))
        share_id = str(uuid.uuid4())
        if not self.store.set(f"{KEY_PREFIX}{share_id}", share.model_dump(mode="json", by_alias=True), ttl=ttl):
            raise RuntimeError("Failed to store location share")

        logger.info(f"Created location share {share_id} (ttl={ttl}s, accuracy={share.accuracy.value})")
        return share_id

    def get(self, share_id: str) -> Optional[LocationShareRequest]:
        """The share, or None when it is unknown or expired."""
        data = self.store.get(f"{KEY_PREFIX}{share_id}")
        if not data:
            return None

        try:
            share = LocationShareRequest.model_validate(data)
        except ValidationError as e:
            logger.error(f"Unreadable location share {share_id}: {e}")
            return None
        if _aware(share.expires) <= _utcnow():
            self.store.delete(f"{KEY_PREFIX}{share_id}")
            logger.info(f"Location share {share_id} expired and was removed")
            return None
        return share

    def delete(self, share_id: str) -> bool:
        return self.store.delete(f"{KEY_PREFIX}{share_id}")

    def active(self) -> List[Dict[str, Any]]:
        """All unexpired shares as {id, data} pairs."""
        shares = []
        for key in list(self.store.keys(f"{KEY_PREFIX}*")):
            share_id = key[len(KEY_PREFIX):]
            share = self.get(share_id)
            if share is not None:
                shares.append({"id": share_id, "data": share})
        return shares
