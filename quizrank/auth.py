"""
Bearer-token authentication producing the request principal

Tokens are issued by the platform's auth service; this module only
verifies them and resolves the user.
"""
from uuid import UUID

from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from pydantic import BaseModel
from sqlalchemy.orm import Session
from starlette import status

from quizrank.config import settings
from quizrank.database import get_db
from quizrank.models import User

oauth2_bearer = OAuth2PasswordBearer(tokenUrl="/auth/token")


class Principal(BaseModel):
    """Authenticated caller"""
    user_id: UUID
    role: str = "user"


def get_current_principal(
    token: str = Depends(oauth2_bearer),
    db: Session = Depends(get_db)
) -> Principal:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        user_id = payload.get("userId") or payload.get("sub")
        if user_id is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token.")
        user_id = UUID(str(user_id))
    except (JWTError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token.")

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token is not valid. User not found.")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account is deactivated.")

    return Principal(user_id=user.id, role=payload.get("role") or user.role or "user")
