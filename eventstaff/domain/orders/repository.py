"""Order repository - Database operations for orders"""

from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ...models import Order


class OrderRepository:
    """Repository for order database operations"""

    @staticmethod
    def get_order(db: Session, order_id: str) -> Optional[Order]:
        return db.query(Order).filter(Order.id == order_id).first()

    @staticmethod
    def get_order_for_update(db: Session, order_id: str) -> Optional[Order]:
        """Row-locked read for read-modify-write sequences"""
        return db.query(Order).filter(Order.id == order_id).with_for_update().first()

    @staticmethod
    def get_orders(
        db: Session,
        status: Optional[Iterable[str]] = None,
        user_id: Optional[str] = None,
    ) -> list[Order]:
        """Orders newest first, optionally filtered by statuses and owner"""
        query = db.query(Order)
        if status:
            query = query.filter(Order.status.in_(list(status)))
        if user_id:
            query = query.filter(Order.user_id == user_id)
        return query.order_by(Order.created_at.desc(), Order.date.desc()).all()

    @staticmethod
    def get_orders_for_staff(db: Session, staff_id: str, statuses: Iterable[str]) -> list[Order]:
        """Orders whose assigned staff list contains staff_id"""
        candidates = (
            db.query(Order)
            .filter(Order.status.in_(list(statuses)))
            .order_by(Order.date.asc())
            .all()
        )
        return [o for o in candidates if staff_id in (o.assigned_staff or [])]

    @staticmethod
    def create_order(db: Session, **order_data) -> Order:
        order = Order(**order_data)
        db.add(order)
        db.commit()
        db.refresh(order)
        return order
