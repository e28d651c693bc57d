from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from sharehouse import auth
from sharehouse.database import get_db
from sharehouse.dependencies import get_current_active_user
from sharehouse.models import User
from sharehouse.rate_limit import limiter
from sharehouse.schemas import SessionRead, Token, UserCreate, UserRead, UserUpdate
from sharehouse.service import create_service_app

app = create_service_app("Users Service", "users")


def _username_taken(db: Session, username: str, exclude_id: int | None = None) -> bool:
    query = db.query(User).filter(User.username == username)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return query.first() is not None


@app.post("/users/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")
def register_user(request: Request, user_in: UserCreate, db: Session = Depends(get_db)) -> User:
    username = user_in.username.strip()
    if _username_taken(db, username):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already exists")
    if db.query(User).filter(User.room_number == user_in.room_number).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Room number already assigned")
    if user_in.email and db.query(User).filter(User.email == user_in.email).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")

    user = User(
        username=username,
        email=user_in.email,
        room_number=user_in.room_number,
        hashed_password=auth.get_password_hash(user_in.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@app.post("/users/login", response_model=Token)
@limiter.limit("10/minute")
def login(request: Request, form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)) -> Token:
    user = auth.authenticate_user(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect username or password")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User not activated")
    return Token(access_token=auth.create_session_token(user))


@app.get("/users/me", response_model=UserRead)
@limiter.limit("60/minute")
def read_me(request: Request, current_user: User = Depends(get_current_active_user)) -> User:
    return current_user


@app.put("/users/me", response_model=SessionRead)
@limiter.limit("10/minute")
def update_me(
    request: Request,
    user_update: UserUpdate,
    current_user: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> SessionRead:
    if user_update.username:
        username = user_update.username.strip()
        if _username_taken(db, username, exclude_id=current_user.id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already exists")
        current_user.username = username
    if user_update.profile_picture is not None:
        current_user.profile_picture = user_update.profile_picture or None
    if user_update.password:
        current_user.hashed_password = auth.get_password_hash(user_update.password)

    db.commit()
    db.refresh(current_user)
    # the previous token still carries the old snapshot; hand out a fresh one
    return SessionRead(
        user=UserRead.model_validate(current_user),
        token=Token(access_token=auth.create_session_token(current_user)),
    )
