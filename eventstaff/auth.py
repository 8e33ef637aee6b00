import base64
import json
import logging
import time
from dataclasses import dataclass
from typing import Optional

import httpx
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.x509 import load_pem_x509_certificate
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import FIREBASE_PROJECT_ID
from .constants import Role
from .database import get_db
from .models import Staff, User

logger = logging.getLogger(__name__)

security = HTTPBearer()

GOOGLE_CERTS_URL = (
    "https://www.googleapis.com/robot/v1/metadata/x509/securetoken@system.gserviceaccount.com"
)

# Cache for Google's public keys
_cached_keys = None


@dataclass(frozen=True)
class SessionContext:
    """Authenticated caller, passed explicitly into every workflow"""

    user_id: str
    role: Role
    name: str = ""
    staff_id: Optional[str] = None

    def has_role(self, *roles: Role) -> bool:
        return self.role in roles


def _b64decode(segment: str) -> bytes:
    padding_len = 4 - len(segment) % 4
    return base64.urlsafe_b64decode(segment + ("=" * padding_len if padding_len != 4 else ""))


async def get_google_public_keys(force_refresh: bool = False):
    """Fetch Google's public keys for Firebase token verification"""
    global _cached_keys
    if _cached_keys and not force_refresh:
        logger.debug("✅ Using cached Google public keys")
        return _cached_keys

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(GOOGLE_CERTS_URL, timeout=10.0)
            if response.status_code == 200:
                _cached_keys = response.json()
                logger.info(f"✅ Fetched {len(_cached_keys)} Google public keys")
                return _cached_keys
            logger.error(f"❌ Failed to fetch Google public keys: HTTP {response.status_code}")
    except httpx.HTTPError as e:
        logger.error(f"❌ Error fetching Google public keys: {str(e)}")
    return None


async def verify_firebase_token(token: str) -> dict:
    """
    Verify a Firebase ID token with full signature verification against
    Google's x509 certificates, then check aud/iss/exp/iat/auth_time claims.
    """
    if not FIREBASE_PROJECT_ID:
        logger.error("❌ FIREBASE_PROJECT_ID not configured")
        raise HTTPException(status_code=500, detail="Firebase not configured")

    parts = token.split(".")
    if len(parts) != 3:
        raise HTTPException(status_code=401, detail="Invalid token format")
    header_b64, payload_b64, signature_b64 = parts

    try:
        header = json.loads(_b64decode(header_b64))
    except (ValueError, TypeError) as e:
        logger.error(f"❌ Failed to decode token header: {str(e)}")
        raise HTTPException(status_code=401, detail="Invalid token header") from e

    kid = header.get("kid")
    if header.get("alg") != "RS256":
        raise HTTPException(status_code=401, detail="Invalid token algorithm")
    if not kid:
        raise HTTPException(status_code=401, detail="Token missing key ID")

    public_keys = await get_google_public_keys()
    if not public_keys or kid not in public_keys:
        logger.warning(f"⚠️ Key ID {kid} not found in public keys, refreshing cache")
        public_keys = await get_google_public_keys(force_refresh=True)
        if not public_keys or kid not in public_keys:
            raise HTTPException(status_code=401, detail="Unable to verify token signature")

    try:
        cert = load_pem_x509_certificate(public_keys[kid].encode(), default_backend())
        cert.public_key().verify(
            _b64decode(signature_b64),
            f"{header_b64}.{payload_b64}".encode(),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )
        payload = json.loads(_b64decode(payload_b64))
    except Exception as e:
        logger.error(f"❌ Token signature verification failed: {type(e).__name__}: {str(e)}")
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
    # Allow 60 seconds clock skew
    if payload.get("iat", 0) > now + 60:
        raise HTTPException(status_code=401, detail="Invalid token")
    if "auth_time" not in payload:
        raise HTTPException(status_code=401, detail="Invalid token claims")

    return payload


def build_session_context(db: Session, user: User) -> SessionContext:
    """Resolve role and linked staff record for a user"""
    staff_id = db.query(Staff.id).filter(Staff.user_id == user.id).scalar()
    try:
        role = Role(user.role)
    except ValueError:
        logger.warning(f"⚠️ User {user.id} has unknown role '{user.role}', treating as consumer")
        role = Role.CONSUMER
    return SessionContext(user_id=user.id, role=role, name=user.name or "", staff_id=staff_id)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get current user from Firebase token, creating a consumer profile on first sight"""
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    decoded_token = await verify_firebase_token(credentials.credentials)

    # Firebase ID tokens use 'sub' as the user ID claim
    firebase_uid = decoded_token.get("sub") or decoded_token.get("user_id")
    if not firebase_uid:
        logger.error(f"❌ Token missing user ID claim. Claims: {list(decoded_token.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")

    user = db.query(User).filter(User.id == firebase_uid).first()
    if not user:
        logger.info(f"🆕 Creating consumer profile for {firebase_uid}")
        user = User(
            id=firebase_uid,
            name=decoded_token.get("name") or "",
            phone=decoded_token.get("phone_number"),
            role=Role.CONSUMER.value,
        )
        db.add(user)
        try:
            db.commit()
            db.refresh(user)
        except Exception:
            db.rollback()
            raise

    return user


async def get_session_context(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SessionContext:
    return build_session_context(db, user)


def require_roles(*roles: Role):
    """
    Build a dependency that only admits the given roles.

    Example:
        @router.post("/{order_id}/confirm")
        async def confirm(ctx: SessionContext = Depends(require_roles(Role.ADMIN))):
            ...
    """
    allowed = frozenset(roles)

    async def role_guard(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
        if ctx.role not in allowed:
            logger.warning(f"⚠️ User {ctx.user_id} ({ctx.role.value}) denied; requires one of {sorted(r.value for r in allowed)}")
            raise HTTPException(status_code=403, detail="You do not have permission to perform this action")
        return ctx

    return role_guard
