import logging
import time
from typing import Optional, Dict, Any

import httpx
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, jwk
from jose.exceptions import JWTError, JWKError, ExpiredSignatureError, JWTClaimsError
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import AuthorizationError
from app.db.session import get_db
from app.models.profile import Profile

logger = logging.getLogger(__name__)

# Missing credentials are reported by get_current_identity, not by HTTPBearer
security = HTTPBearer(auto_error=False)

SUPPORTED_ALGORITHMS = ["ES256", "RS256"]

# JWKS cache with TTL
_jwks_cache: Optional[Dict[str, Any]] = None
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 600  # 10 minutes in seconds


def _unauthorized(detail: str = "Authentication required") -> AuthorizationError:
    return AuthorizationError(detail, status_code=401)


def fetch_jwks() -> Dict[str, Any]:
    """
    Return the Supabase JWKS, cached for JWKS_CACHE_TTL.
    If a refresh fails the last cached copy is used even when expired.
    """
    global _jwks_cache, _jwks_cache_time

    now = time.time()
    if _jwks_cache is not None and (now - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    try:
        logger.info(f"Fetching JWKS from {settings.supabase_jwks_url}")
        response = httpx.get(settings.supabase_jwks_url, timeout=10.0)
        response.raise_for_status()
        jwks_data = response.json()
        if not isinstance(jwks_data, dict) or "keys" not in jwks_data:
            raise ValueError("Invalid JWKS structure: missing 'keys' field")
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Failed to fetch JWKS: {e}")
        if _jwks_cache is not None:
            logger.warning("Using expired JWKS cache due to fetch failure")
            return _jwks_cache
        raise AuthorizationError("Unable to verify token: JWKS unavailable", status_code=503)

    _jwks_cache = jwks_data
    _jwks_cache_time = now
    logger.info(f"JWKS fetched, {len(jwks_data['keys'])} keys found")
    return jwks_data


def _find_signing_key(token: str, jwks: Dict[str, Any]) -> Dict[str, Any]:
    """Pick the JWK whose kid matches the token header."""
    try:
        kid = jwt.get_unverified_header(token).get("kid")
    except JWTError as e:
        logger.warning(f"Unreadable token header: {e}")
        raise _unauthorized("Token verification failed")

    if not kid:
        logger.warning("Token missing 'kid' in header")
        raise _unauthorized("Token verification failed")

    for key in jwks.get("keys", []):
        if key.get("kid") == kid:
            return key

    logger.warning(f"Key ID '{kid}' not found in JWKS")
    raise _unauthorized("Token verification failed")


def verify_supabase_token(token: str) -> dict:
    """
    Verify a Supabase access token (signature, audience, issuer, expiry) and return its claims.
    Raises AuthorizationError (401) on any failure.
    """
    jwk_key = _find_signing_key(token, fetch_jwks())

    header_alg = jwt.get_unverified_header(token).get("alg")
    jwk_alg = jwk_key.get("alg")
    if header_alg and jwk_alg and header_alg != jwk_alg:
        logger.warning(f"Algorithm mismatch: header={header_alg}, JWK={jwk_alg}")
        raise _unauthorized("Token verification failed")
    algorithm = header_alg or jwk_alg or "ES256"
    if algorithm not in SUPPORTED_ALGORITHMS:
        logger.warning(f"Unsupported algorithm: {algorithm}")
        raise _unauthorized("Token verification failed")

    try:
        key = jwk.construct(jwk_key, algorithm=algorithm)
        return jwt.decode(
            token,
            key,
            algorithms=SUPPORTED_ALGORITHMS,
            audience=settings.supabase_jwt_audience,
            issuer=settings.supabase_issuer,
        )
    except ExpiredSignatureError:
        logger.warning("Token has expired")
    except JWTClaimsError as e:
        logger.warning(f"Token claims validation failed: {e}")
    except (JWTError, JWKError) as e:
        logger.warning(f"JWT verification error: {e}")
    raise _unauthorized("Token verification failed")


class Identity(BaseModel):
    """Authenticated identity taken from the token claims."""
    uid: str
    email: Optional[str] = None


def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Identity:
    if not credentials or not credentials.credentials:
        raise _unauthorized()

    claims = verify_supabase_token(credentials.credentials)
    uid = claims.get("sub")
    if not uid:
        logger.warning("Token missing subject (sub) claim")
        raise _unauthorized("Token missing subject (sub) claim")

    return Identity(uid=str(uid), email=claims.get("email"))


def get_or_create_profile(db: Session, *, uid: str, email: str | None = None) -> Profile:
    """
    Profile row for a Supabase user id, created on first sight.
    A concurrent insert for the same id is resolved by re-reading the winner.
    """
    profile = db.query(Profile).filter(Profile.id == uid).first()
    if profile:
        if email is not None and profile.email is None:
            profile.email = email
            db.commit()
            db.refresh(profile)
        return profile

    logger.info(f"Creating profile for uid={uid}")
    profile = Profile(id=uid, email=email)
    db.add(profile)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        profile = db.query(Profile).filter(Profile.id == uid).first()
        if profile is None:
            raise
        return profile
    db.refresh(profile)
    return profile


def get_current_profile(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> Profile:
    """Profile of the authenticated caller; raises AuthorizationError (401) for guests."""
    return get_or_create_profile(db, uid=identity.uid, email=identity.email)
