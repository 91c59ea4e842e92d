import base64
import json
import logging
import time

import httpx
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.x509 import load_pem_x509_certificate
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .config import ADMIN_EMAILS, FIREBASE_PROJECT_ID
from .database import get_db
from .models import User, UserRole

logger = logging.getLogger(__name__)

security = HTTPBearer()

GOOGLE_CERTS_URL = (
    "https://www.googleapis.com/robot/v1/metadata/x509/securetoken@system.gserviceaccount.com"
)
CLOCK_SKEW_SECONDS = 60

# Cache for Google's public keys
_cached_keys = None


async def get_google_public_keys(refresh: bool = False):
    """Fetch the x509 certificates Firebase signs ID tokens with"""
    global _cached_keys
    if _cached_keys and not refresh:
        return _cached_keys

    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(GOOGLE_CERTS_URL)
        if response.status_code == 200:
            _cached_keys = response.json()
            logger.info(f"✅ Fetched {len(_cached_keys)} Google public keys")
            return _cached_keys
        logger.error(f"❌ Failed to fetch Google public keys: HTTP {response.status_code}")
    except httpx.HTTPError as e:
        logger.error(f"❌ Error fetching Google public keys: {str(e)}")
    return None


def _b64decode(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


async def verify_firebase_token(token: str) -> dict:
    """
    Verify a Firebase ID token.

    Checks the RS256 signature against Google's published certificates, then
    the audience, issuer, expiry and issued-at claims. Returns the decoded
    payload or raises a 401.
    """
    if not FIREBASE_PROJECT_ID:
        logger.error("❌ FIREBASE_PROJECT_ID not configured")
        raise HTTPException(status_code=500, detail="Authentication is not configured")

    parts = token.split(".")
    if len(parts) != 3:
        raise HTTPException(status_code=401, detail="Invalid token format")
    header_b64, payload_b64, signature_b64 = parts

    try:
        header = json.loads(_b64decode(header_b64))
        payload = json.loads(_b64decode(payload_b64))
        signature = _b64decode(signature_b64)
    except ValueError as e:
        logger.warning(f"⚠️ Undecodable token: {str(e)}")
        raise HTTPException(status_code=401, detail="Invalid token") from e

    kid = header.get("kid")
    if header.get("alg") != "RS256" or not kid:
        logger.warning(f"⚠️ Rejected token header: alg={header.get('alg')}, kid={kid}")
        raise HTTPException(status_code=401, detail="Invalid token header")

    public_keys = await get_google_public_keys()
    if not public_keys or kid not in public_keys:
        # Google rotates keys; retry once with a fresh set
        public_keys = await get_google_public_keys(refresh=True)
        if not public_keys or kid not in public_keys:
            logger.error(f"❌ Key ID {kid} not found in public keys after refresh")
            raise HTTPException(status_code=401, detail="Unable to verify token signature")

    public_key = load_pem_x509_certificate(public_keys[kid].encode()).public_key()
    try:
        public_key.verify(
            signature,
            f"{header_b64}.{payload_b64}".encode(),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )
    except Exception as e:
        logger.warning(f"⚠️ Token signature verification failed: {type(e).__name__}")
        raise HTTPException(status_code=401, detail="Invalid token signature") from e

    if payload.get("aud") != FIREBASE_PROJECT_ID:
        raise HTTPException(status_code=401, detail="Invalid token audience")
    if payload.get("iss") != f"https://securetoken.google.com/{FIREBASE_PROJECT_ID}":
        raise HTTPException(status_code=401, detail="Invalid token issuer")

    now = time.time()
    if payload.get("exp", 0) < now:
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please refresh your session.",
            headers={"X-Token-Expired": "true"},
        )
    if payload.get("iat", 0) > now + CLOCK_SKEW_SECONDS:
        raise HTTPException(status_code=401, detail="Invalid token")

    return payload


def _split_display_name(name: str) -> tuple:
    first, _, last = (name or "").strip().partition(" ")
    return first[:50], last.strip()[:50]


def get_or_create_user(db: Session, claims: dict) -> User:
    """Find the user for verified token claims, creating it on first sign-in"""
    firebase_uid = claims.get("sub") or claims.get("user_id")
    if not firebase_uid:
        raise HTTPException(status_code=401, detail="Invalid token claims")

    user = db.query(User).filter(User.firebase_uid == firebase_uid).first()
    if user:
        return user

    email = (claims.get("email") or "").lower()
    # Unverified addresses can be registered by anyone
    email_verified = claims.get("email_verified") is True
    if email:
        user = db.query(User).filter(User.email == email).first()
        if user:
            if not email_verified:
                logger.warning(f"⚠️ Refusing to link unverified {email} to identity {firebase_uid}")
                raise HTTPException(
                    status_code=409,
                    detail="An account with this email already exists. Verify your email address to sign in.",
                )
            # Same address signed in through another provider
            logger.info(f"🔄 Linking {email} to new identity {firebase_uid}")
            user.firebase_uid = firebase_uid
            db.commit()
            db.refresh(user)
            return user

    first_name, last_name = _split_display_name(claims.get("name", ""))
    role = UserRole.ADMIN if email_verified and email in ADMIN_EMAILS else UserRole.USER
    user = User(
        firebase_uid=firebase_uid,
        email=email or f"{firebase_uid}@users.invalid",
        first_name=first_name,
        last_name=last_name,
        role=role,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"⚠️ Concurrent sign-up for {user.email}: {e.orig}")
        raise HTTPException(
            status_code=409, detail="Account is being created. Please try again."
        ) from e
    db.refresh(user)
    logger.info(f"🆕 New user created: {user.email} (role={role.value})")
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to an active User"""
    claims = await verify_firebase_token(credentials.credentials)
    user = get_or_create_user(db, claims)

    if not user.is_active:
        logger.warning(f"⚠️ Inactive user {user.email} attempted to sign in")
        raise HTTPException(status_code=403, detail="Account is disabled")
    return user


async def get_current_admin(user: User = Depends(get_current_user)) -> User:
    """Same as get_current_user, restricted to administrators"""
    if user.role != UserRole.ADMIN:
        logger.warning(f"⚠️ User {user.email} attempted to access an admin route")
        raise HTTPException(status_code=403, detail="Administrator access required")
    return user
