"""Reusable FastAPI dependencies for auth, database access and the scheduler."""
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from .auth import session_user_id
from .config import get_settings
from .database import get_db
from .models import User
from .notifications import NotificationSink, get_notification_sink
from .scheduler import BookingScheduler

oauth_scheme = OAuth2PasswordBearer(tokenUrl="/users/login")


def get_current_user(token: str = Depends(oauth_scheme), db: Session = Depends(get_db)) -> User:
    user = db.get(User, session_user_id(token))
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User not activated")
    return current_user


def get_scheduler(
    db: Session = Depends(get_db),
    sink: NotificationSink = Depends(get_notification_sink),
) -> BookingScheduler:
    return BookingScheduler(db, sink, range_padding_days=get_settings().range_padding_days)
