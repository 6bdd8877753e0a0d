"""
Authentication Middleware for the Minka Platform
JWT bearer validation and organizer profile resolution
"""

import jwt as pyjwt  # Use PyJWT with alias to avoid conflicts
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional
from fastapi import HTTPException, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from config import ConfigManager
from database import get_db
from models import Profile

logger = logging.getLogger(__name__)

# HTTP Bearer security scheme
security = HTTPBearer(auto_error=False)


class AuthenticationError(Exception):
    """Custom authentication error"""
    pass


class TokenManager:
    """JWT Token management"""

    def __init__(self):
        jwt_config = ConfigManager().get_jwt_config()
        self.secret_key = jwt_config["secret_key"]
        self.algorithm = jwt_config["algorithm"]
        self.expiration_hours = jwt_config["expiration_hours"]

    def create_access_token(self, data: Dict[str, Any], expires_in: Optional[timedelta] = None) -> str:
        """Create JWT access token"""
        to_encode = data.copy()
        expire = datetime.now(timezone.utc) + (expires_in or timedelta(hours=self.expiration_hours))
        to_encode.update({"exp": expire, "type": "access"})

        try:
            return pyjwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)
        except Exception as e:
            logger.error(f"Token creation failed: {e}")
            raise AuthenticationError("Failed to create access token")

    def verify_token(self, token: str) -> Dict[str, Any]:
        """Verify and decode JWT token"""
        try:
            payload = pyjwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except pyjwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired")
        except pyjwt.InvalidTokenError as e:
            logger.warning(f"Token verification failed: {e}")
            raise AuthenticationError("Invalid token")

        if payload.get("type") != "access":
            raise AuthenticationError("Invalid token type")
        return payload


token_manager = TokenManager()


def create_organizer_token(profile: Profile) -> str:
    """Issue an access token for an organizer profile"""
    return token_manager.create_access_token({
        "sub": profile.id,
        "email": profile.email,
    })


async def get_current_organizer(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Profile:
    """Resolve the organizer profile of the authenticated session"""
    try:
        if credentials is None:
            raise AuthenticationError("Unauthorized - You must be logged in")

        payload = token_manager.verify_token(credentials.credentials)
        email = payload.get("email")
        if not email:
            raise AuthenticationError("Invalid token payload")

    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    organizer = db.query(Profile).filter(Profile.email == email).first()
    if not organizer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Organizer profile not found"
        )
    return organizer
