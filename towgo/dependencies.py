"""Dependencies for FastAPI routes."""
import logging
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient
from sqlalchemy.orm import Session

from towgo.config import settings
from towgo.database import User, get_db
from towgo.search.aggregator import WebSearchAggregator
from towgo.search.location_sharing import LocationShareService
from towgo.search.query_enhancement import QueryEnhancementService, query_enhancement_service
from towgo.services.google_maps import GoogleMapsClient, google_maps_client
from towgo.services.redis_client import RedisClient, redis_client
from towgo.services.smithery_client import SmitheryClient, smithery_client
from towgo.services.stripe_client import StripeClient, stripe_client

logger = logging.getLogger(__name__)

# Bearer token is optional, anonymous requests act as the guest user
optional_bearer = HTTPBearer(auto_error=False)

_aggregator: Optional[WebSearchAggregator] = None


def verify_auth0_token(token: str) -> dict:
    """
    Validate an Auth0 JWT token and return user info.

    Args:
        token: JWT token from Auth0

    Returns:
        dict with user information (id, email, name)

    Raises:
        HTTPException: If token is invalid
    """
    auth0_domain = settings.auth0_domain
    try:
        jwks_client = PyJWKClient(f"https://{auth0_domain}/.well-known/jwks.json")
        signing_key = jwks_client.get_signing_key_from_jwt(token)

        payload = jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            audience=settings.auth0_audience,
            issuer=f"https://{auth0_domain}/",
        )
    except jwt.ExpiredSignatureError:
        logger.warning("Token has expired")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.PyJWTError as e:
        logger.warning(f"Invalid token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication credentials: {e}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return {
        "id": payload.get("sub"),
        "email": payload.get("email") or payload.get(f"https://{auth0_domain}/email"),
        "name": payload.get("name") or payload.get(f"https://{auth0_domain}/name"),
    }


def _ensure_user(db: Session, user: dict) -> None:
    """Create the user row on first sight so favorites and payments can reference it."""
    if db.get(User, user["id"]) is None:
        db.add(User(id=user["id"], email=user.get("email"), name=user.get("name")))
        db.commit()


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_bearer),
    db: Session = Depends(get_db),
) -> dict:
    """
    Resolve the user a request acts as.

    A bearer token is validated against Auth0 when Auth0 is configured.
    Requests without a token, or any request while Auth0 is not configured,
    act as the guest user.
    """
    if credentials is not None and settings.auth0_domain:
        user = verify_auth0_token(credentials.credentials)
    else:
        user = {"id": settings.guest_user_id, "email": None, "name": "Guest"}

    _ensure_user(db, user)
    return user


def get_enhancement_service() -> QueryEnhancementService:
    return query_enhancement_service


def get_redis() -> RedisClient:
    return redis_client


def get_aggregator() -> WebSearchAggregator:
    global _aggregator
    if _aggregator is None:
        _aggregator = WebSearchAggregator(settings, cache=redis_client)
    return _aggregator


def get_location_share_service(store: RedisClient = Depends(get_redis)) -> LocationShareService:
    return LocationShareService(store, settings)


def get_maps_client() -> GoogleMapsClient:
    return google_maps_client


def get_smithery_client() -> SmitheryClient:
    return smithery_client


def get_stripe_client() -> StripeClient:
    return stripe_client
