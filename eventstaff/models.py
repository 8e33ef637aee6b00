import uuid

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .constants import (
    InquiryStatus,
    InvoiceStatus,
    OrderStatus,
    PayoutStatus,
    Role,
    StaffType,
)
from .database import Base


def generate_id():
    """Generate a document-style string ID"""
    return uuid.uuid4().hex


class User(Base):
    """Login account; clients and back-office users share this table"""

    __tablename__ = "users"

    # Firebase uid
    id = Column(String(128), primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)
    role = Column(String(50), nullable=False, default=Role.CONSUMER.value, index=True)
    company_name = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    gst_number = Column(String(20), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    orders = relationship("Order", back_populates="user")


class Staff(Base):
    """Person eligible for assignment to events, independent of User"""

    __tablename__ = "staff"

    id = Column(String(64), primary_key=True, index=True, default=generate_id)
    # Optional link to the staff member's login account
    user_id = Column(String(128), ForeignKey("users.id"), nullable=True, unique=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)
    role = Column(String(50), nullable=False, index=True)
    staff_type = Column(String(50), nullable=False, default=StaffType.INDIVIDUAL.value)
    address = Column(Text, nullable=True)
    id_number = Column(String(50), nullable=True)  # Aadhar or PAN
    bank_account_number = Column(String(50), nullable=True)
    bank_ifsc_code = Column(String(20), nullable=True)
    per_event_charge = Column(Float, nullable=True)
    monthly_salary = Column(Float, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class Order(Base):
    """One event booking"""

    __tablename__ = "orders"

    id = Column(String(64), primary_key=True, index=True, default=generate_id)
    user_id = Column(String(128), ForeignKey("users.id"), nullable=False, index=True)
    date = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD
    time = Column(String(5), nullable=False, default="19:00")
    attendees = Column(Integer, nullable=False)
    menu_type = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value, index=True)
    # Set-like list of staff ids
    assigned_staff = Column(JSON, nullable=False, default=list)
    invoice_status = Column(String(20), nullable=False, default=InvoiceStatus.PENDING.value)
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("User", back_populates="orders")
    payouts = relationship("Payout", back_populates="order", cascade="all, delete-orphan")


class Availability(Base):
    """Per-staff calendar; one row per staff member keyed by staff id"""

    __tablename__ = "availability"

    id = Column(String(64), ForeignKey("staff.id"), primary_key=True)
    # {"YYYY-MM-DD": "available" | "unavailable"}
    dates = Column(JSON, nullable=False, default=dict)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Invoice(Base):
    """Invoice derived from an order; keyed 1:1 by order id"""

    __tablename__ = "invoices"

    id = Column(String(64), ForeignKey("orders.id"), primary_key=True)
    invoice_number = Column(String(50), nullable=False, index=True)
    invoice_date = Column(String(10), nullable=False)
    event_date = Column(String(10), nullable=False)
    client_id = Column(String(128), ForeignKey("users.id"), nullable=False, index=True)
    # {id, name, company_name, address, gstin}
    client = Column(JSON, nullable=False)
    line_items = Column(JSON, nullable=False, default=list)
    subtotal = Column(Float, nullable=False)
    gst_rate = Column(Float, nullable=False)
    gst_amount = Column(Float, nullable=False)
    total_amount = Column(Float, nullable=False)
    firm_id = Column(String(64), ForeignKey("firms.id"), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Payout(Base):
    """Staff payout recorded when an event is reviewed"""

    __tablename__ = "payouts"

    id = Column(String(64), primary_key=True, index=True, default=generate_id)
    order_id = Column(String(64), ForeignKey("orders.id"), nullable=False, index=True)
    staff_id = Column(String(64), ForeignKey("staff.id"), nullable=False, index=True)
    staff_name = Column(String(255), nullable=False)
    amount = Column(Float, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=PayoutStatus.PENDING.value, index=True)
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    order = relationship("Order", back_populates="payouts")


class Payment(Base):
    """Client payment recorded against the ledger"""

    __tablename__ = "payments"

    id = Column(String(64), primary_key=True, index=True, default=generate_id)
    client_id = Column(String(128), ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    date = Column(String(10), nullable=False)
    description = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class Firm(Base):
    __tablename__ = "firms"

    id = Column(String(64), primary_key=True, index=True, default=generate_id)
    company_name = Column(String(255), nullable=False)
    address = Column(Text, nullable=False)
    contact_number = Column(String(20), nullable=False)
    gst_type = Column(String(10), nullable=False)
    gst_number = Column(String(20), nullable=True)
    gst_percentage = Column(Float, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class Inquiry(Base):
    """Staff signup interest submitted from the public form"""

    __tablename__ = "inquiries"

    id = Column(String(64), primary_key=True, index=True, default=generate_id)
    name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default=InquiryStatus.NEW.value)
    created_at = Column(DateTime, server_default=func.now())


class SmsLog(Base):
    """Track SMS messages sent via Twilio"""

    __tablename__ = "sms_logs"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String(64), ForeignKey("orders.id"), nullable=True, index=True)
    staff_id = Column(String(64), nullable=True)
    to_phone = Column(String(20), nullable=False)
    message_body = Column(Text, nullable=False)
    status = Column(String(20), nullable=False)  # sent, failed
    provider_message_sid = Column(String(64), nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
