import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from .models import User
from .security_utils import verify_jwt_token

logger = logging.getLogger(__name__)

security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get current user from the identity provider's bearer token"""

    if not credentials:
        logger.error("❌ No credentials provided")
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    token = credentials.credentials

    # Basic token format validation before processing
    if len(token.split(".")) != 3:
        logger.warning(f"⚠️ Malformed token received, token length: {len(token)}")
        raise HTTPException(
            status_code=401, detail="Invalid token format. Expected a valid JWT token."
        )

    claims = verify_jwt_token(token)
    if claims is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    subject = claims.get("sub") or claims.get("user_id")
    if not subject:
        logger.error(f"❌ Token missing subject claim. Available claims: {list(claims.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")

    email = claims.get("email")
    name = claims.get("name", "")

    user = db.query(User).filter(User.external_id == str(subject)).first()
    if user:
        return user

    # First request from this identity - create the local user
    logger.info(f"🆕 Creating new user: {email or subject}")
    user = User(external_id=str(subject), email=email, full_name=name, company=claims.get("company"))
    db.add(user)
    try:
        db.commit()
        db.refresh(user)
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to create user {subject}: {e}")
        raise HTTPException(status_code=500, detail="Failed to create user") from e

    return user
