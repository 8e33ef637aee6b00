"""Staff repository - Database operations for staff members"""

from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ...models import Availability, Payout, Staff


class StaffRepository:
    """Repository for staff database operations"""

    @staticmethod
    def get_staff(db: Session) -> list[Staff]:
        return db.query(Staff).order_by(Staff.name.asc()).all()

    @staticmethod
    def get_staff_by_roles(db: Session, roles: Iterable[str]) -> list[Staff]:
        return (
            db.query(Staff)
            .filter(Staff.role.in_(list(roles)))
            .order_by(Staff.name.asc())
            .all()
        )

    @staticmethod
    def get_staff_by_id(db: Session, staff_id: str) -> Optional[Staff]:
        return db.query(Staff).filter(Staff.id == staff_id).first()

    @staticmethod
    def get_staff_by_ids(db: Session, staff_ids: Iterable[str]) -> dict[str, Staff]:
        """Batch lookup; missing ids are simply absent from the result"""
        ids = set(staff_ids)
        if not ids:
            return {}
        return {s.id: s for s in db.query(Staff).filter(Staff.id.in_(ids)).all()}

    @staticmethod
    def get_staff_by_user_id(db: Session, user_id: str) -> Optional[Staff]:
        return db.query(Staff).filter(Staff.user_id == user_id).first()

    @staticmethod
    def create_staff(db: Session, **staff_data) -> Staff:
        staff = Staff(**staff_data)
        db.add(staff)
        db.commit()
        db.refresh(staff)
        return staff

    @staticmethod
    def update_staff(db: Session, staff: Staff, **updates) -> Staff:
        for key, value in updates.items():
            if value is not None and hasattr(staff, key):
                setattr(staff, key, value)
        db.commit()
        db.refresh(staff)
        return staff

    @staticmethod
    def has_payouts(db: Session, staff_id: str) -> bool:
        return db.query(Payout.id).filter(Payout.staff_id == staff_id).first() is not None

    @staticmethod
    def delete_staff(db: Session, staff: Staff) -> None:
        """Delete a staff member together with their availability calendar"""
        db.query(Availability).filter(Availability.id == staff.id).delete(
            synchronize_session=False
        )
        db.delete(staff)
        db.commit()
