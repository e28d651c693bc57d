#!/usr/bin/env python3
"""Seed the shared spaces of a fresh house. Existing name codes are left untouched."""
from sqlalchemy.orm import Session

from sharehouse.database import Base, SessionLocal, engine
from sharehouse.models import SharedSpace

DEFAULT_SPACES = [
    {
        "name_code": "music-theater",
        "name_en": "Music theater",
        "name_jp": "音楽劇場",
        "description_en": "A theater for music lovers, equipped with a recent sound system and lighting.",
        "description_jp": "最新のサウンドシステムと照明を備えた音楽愛好家のための劇場です。",
        "start_day_time": "8:00",
        "end_day_time": "23:00",
        "max_booking_hours": 3,
        "max_booking_by_user": 2,
    },
    {
        "name_code": "gym",
        "name_en": "Gym",
        "name_jp": "ジム",
        "description_en": "A gym with fitness equipment and machines.",
        "description_jp": "フィットネス機器を備えたジムです。",
        "start_day_time": "8:00",
        "end_day_time": "23:00",
        "max_booking_hours": 1,
        "max_booking_by_user": 2,
    },
    {
        "name_code": "bath",
        "name_en": "Bath",
        "name_jp": "お風呂",
        "description_en": "A bath with hot water and a jacuzzi.",
        "description_jp": "温水とジャグジーを備えたお風呂です。",
        "start_day_time": "8:00",
        "end_day_time": "23:00",
        "max_booking_hours": 1,
        "max_booking_by_user": 2,
    },
]


def seed_spaces(db: Session) -> int:
    existing = {code for (code,) in db.query(SharedSpace.name_code).all()}
    created = 0
    for fields in DEFAULT_SPACES:
        if fields["name_code"] in existing:
            continue
        db.add(SharedSpace(**fields))
        created += 1
    db.commit()
    return created


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        print(f"{seed_spaces(session)} shared space(s) created.")
