from datetime import date
from typing import List, Optional

from fastapi import Depends, Query, Request, status

from sharehouse.dependencies import get_current_active_user, get_scheduler
from sharehouse.models import User
from sharehouse.rate_limit import limiter
from sharehouse.scheduler import BookingScheduler
from sharehouse.schemas import ApiResponse, BookingCount, BookingProposal, BookingRead
from sharehouse.service import create_service_app

app = create_service_app("Bookings Service", "bookings", package_logs=True)


@app.get("/bookings/user", response_model=ApiResponse[List[BookingRead]])
@limiter.limit("60/minute")
def list_my_bookings(
    request: Request,
    current_user: User = Depends(get_current_active_user),
    scheduler: BookingScheduler = Depends(get_scheduler),
) -> ApiResponse[List[BookingRead]]:
    return ApiResponse(data=scheduler.list_user_bookings(current_user))


@app.get("/bookings/number/{space_id}", response_model=ApiResponse[BookingCount])
@limiter.limit("60/minute")
def count_my_bookings(
    request: Request,
    space_id: int,
    current_user: User = Depends(get_current_active_user),
    scheduler: BookingScheduler = Depends(get_scheduler),
) -> ApiResponse[BookingCount]:
    return ApiResponse(data=scheduler.count_active_bookings_for_user(space_id, current_user.id))


@app.get("/bookings/{space_id}", response_model=ApiResponse[List[BookingRead]])
@limiter.limit("60/minute")
def list_space_bookings(
    request: Request,
    space_id: int,
    start_date: Optional[date] = Query(None, description="First day (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="Last day (YYYY-MM-DD)"),
    _: User = Depends(get_current_active_user),
    scheduler: BookingScheduler = Depends(get_scheduler),
) -> ApiResponse[List[BookingRead]]:
    return ApiResponse(data=scheduler.list_bookings_in_range(space_id, start_date, end_date))


@app.post("/bookings/create", response_model=ApiResponse[BookingRead], status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
def create_booking(
    request: Request,
    proposal: BookingProposal,
    current_user: User = Depends(get_current_active_user),
    scheduler: BookingScheduler = Depends(get_scheduler),
) -> ApiResponse[BookingRead]:
    booking = scheduler.propose_booking(proposal, current_user, is_update=False)
    return ApiResponse(message="Booking created successfully!", data=booking)


@app.put("/bookings/update", response_model=ApiResponse[BookingRead])
@limiter.limit("20/minute")
def update_booking(
    request: Request,
    proposal: BookingProposal,
    current_user: User = Depends(get_current_active_user),
    scheduler: BookingScheduler = Depends(get_scheduler),
) -> ApiResponse[BookingRead]:
    booking = scheduler.propose_booking(proposal, current_user, is_update=True)
    return ApiResponse(message="Booking updated successfully!", data=booking)


@app.delete("/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("20/minute")
def delete_booking(
    request: Request,
    booking_id: int,
    current_user: User = Depends(get_current_active_user),
    scheduler: BookingScheduler = Depends(get_scheduler),
) -> None:
    scheduler.delete_booking(booking_id, current_user)
