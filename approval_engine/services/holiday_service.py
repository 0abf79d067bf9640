"""
Holiday calendar service - business logic for holiday management
"""
import logging
from datetime import date
from typing import List, Optional, Set
from sqlalchemy.orm import Session
from approval_engine.constants import PUBLIC_HOLIDAYS
from approval_engine.core.exceptions import ApprovalEngineError, InvalidRangeError, NotFoundError
from approval_engine.models.holiday import Holiday, HolidayKind
from approval_engine.services.audit_service import log_audit
from approval_engine.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)


class DuplicateHolidayError(ApprovalEngineError):
    status_code = 409
    code = "DUPLICATE_HOLIDAY"
    default_detail = "A holiday already exists for this date"


def create_holiday(
    db: Session,
    holiday_date: date,
    name: str,
    kind: HolidayKind = HolidayKind.CUSTOM,
    active: bool = True,
    actor_id: Optional[int] = None
) -> Holiday:
    """
    Create a new holiday

    Raises:
        DuplicateHolidayError: if the date is already in the calendar
    """
    existing = db.query(Holiday).filter(Holiday.date == holiday_date).first()
    if existing:
        raise DuplicateHolidayError(f"Holiday already exists for date {holiday_date}")

    holiday = Holiday(
        year=holiday_date.year,
        date=holiday_date,
        name=name,
        kind=kind,
        active=active,
        created_at=now_utc(),
    )
    db.add(holiday)
    db.commit()
    db.refresh(holiday)

    if actor_id:
        log_audit(
            db=db,
            actor_id=actor_id,
            action="HOLIDAY_CREATE",
            entity_type="holidays",
            entity_id=holiday.id,
            meta={"date": holiday_date, "name": name, "kind": kind}
        )

    return holiday


def list_holidays(
    db: Session,
    year: Optional[int] = None,
    active_only: bool = False
) -> List[Holiday]:
    """List holidays ordered by date, optionally for one year / active only."""
    query = db.query(Holiday)

    if year:
        query = query.filter(Holiday.year == year)

    if active_only:
        query = query.filter(Holiday.active == True)  # noqa: E712

    return query.order_by(Holiday.date).all()


def get_holiday(db: Session, holiday_id: int) -> Holiday:
    holiday = db.query(Holiday).filter(Holiday.id == holiday_id).first()
    if not holiday:
        raise NotFoundError(f"Holiday with id {holiday_id} not found")
    return holiday


def update_holiday(
    db: Session,
    holiday_id: int,
    name: Optional[str] = None,
    active: Optional[bool] = None,
    actor_id: Optional[int] = None
) -> Holiday:
    """Rename or (de)activate a holiday."""
    holiday = get_holiday(db, holiday_id)

    changes = {}
    if name is not None:
        changes["name"] = {"old": holiday.name, "new": name}
        holiday.name = name
    if active is not None:
        changes["active"] = {"old": holiday.active, "new": active}
        holiday.active = active

    db.commit()
    db.refresh(holiday)

    if actor_id and changes:
        log_audit(
            db=db,
            actor_id=actor_id,
            action="HOLIDAY_UPDATE",
            entity_type="holidays",
            entity_id=holiday.id,
            meta=changes
        )

    return holiday


def delete_holiday(db: Session, holiday_id: int, actor_id: Optional[int] = None) -> None:
    holiday = get_holiday(db, holiday_id)
    meta = {"date": holiday.date, "name": holiday.name}
    db.delete(holiday)
    db.commit()

    if actor_id:
        log_audit(
            db=db,
            actor_id=actor_id,
            action="HOLIDAY_DELETE",
            entity_type="holidays",
            entity_id=holiday_id,
            meta=meta
        )


def seed_public_holidays(db: Session, year: int, actor_id: Optional[int] = None) -> List[Holiday]:
    """
    Insert the built-in public holidays for a year, skipping dates already present.

    Returns:
        The newly created holidays
    """
    if year not in PUBLIC_HOLIDAYS:
        raise NotFoundError(f"No built-in public holiday list for {year}")

    existing = {h.date for h in db.query(Holiday).filter(Holiday.year == year).all()}
    created = []
    now = now_utc()
    for iso_date, name in PUBLIC_HOLIDAYS[year]:
        holiday_date = date.fromisoformat(iso_date)
        if holiday_date in existing:
            continue
        holiday = Holiday(
            year=year,
            date=holiday_date,
            name=name,
            kind=HolidayKind.PUBLIC,
            active=True,
            created_at=now,
        )
        db.add(holiday)
        created.append(holiday)
    db.commit()
    logger.info("Seeded %s public holidays for %s", len(created), year)

    if actor_id and created:
        log_audit(
            db=db,
            actor_id=actor_id,
            action="HOLIDAY_SEED",
            entity_type="holidays",
            meta={"year": year, "created": len(created)}
        )
    return created


def get_holiday_set(db: Session, start: date, end: date) -> Set[date]:
    """
    Active holiday dates within [start, end] (inclusive).

    Raises:
        InvalidRangeError: if start is after end
    """
    if start > end:
        raise InvalidRangeError(f"Start date {start} is after end date {end}")

    rows = db.query(Holiday.date).filter(
        Holiday.active == True,  # noqa: E712
        Holiday.date >= start,
        Holiday.date <= end
    ).all()
    return {row[0] for row in rows}
