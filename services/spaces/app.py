from typing import List

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from sharehouse.cache import SpaceListingCache
from sharehouse.config import get_settings
from sharehouse.database import get_db
from sharehouse.dependencies import get_current_active_user
from sharehouse.models import User
from sharehouse.rate_limit import limiter
from sharehouse.schemas import SharedSpaceRead
from sharehouse.service import create_service_app
from sharehouse.store import SharedSpaceCatalog

settings = get_settings()
space_listing_cache = SpaceListingCache(ttl=settings.space_cache_ttl)

app = create_service_app("Shared Spaces Service", "spaces")


@app.get("/spaces", response_model=List[SharedSpaceRead])
@limiter.limit("60/minute")
def list_spaces(
    request: Request,
    _: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> List[SharedSpaceRead]:
    catalog = SharedSpaceCatalog(db)
    return space_listing_cache.get_or_load(
        lambda: [SharedSpaceRead.model_validate(space) for space in catalog.list_all()]
    )


@app.get("/spaces/{space_id}", response_model=SharedSpaceRead)
@limiter.limit("60/minute")
def get_space(
    request: Request,
    space_id: int,
    _: User = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> SharedSpaceRead:
    space = SharedSpaceCatalog(db).find_by_id(space_id)
    if not space:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shared space not found")
    return SharedSpaceRead.model_validate(space)
