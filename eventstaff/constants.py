"""Role, status and type values shared by models, schemas and services"""

from enum import Enum


class Role(str, Enum):
    CONSUMER = "consumer"
    WAITER_STEWARD = "waiter-steward"
    SUPERVISOR = "supervisor"
    PRO = "pro"
    SENIOR_PRO = "senior-pro"
    CAPTAIN_BUTLER = "captain-butler"
    OPERATIONAL_MANAGER = "operational-manager"
    SALES = "sales"
    HR = "hr"
    ACCOUNTANT = "accountant"
    ADMIN = "admin"


class OrderStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    REVIEWED = "Reviewed"


class InvoiceStatus(str, Enum):
    PENDING = "Pending"
    GENERATED = "Generated"


class MenuType(str, Enum):
    VEG = "veg"
    NON_VEG = "non-veg"


class AvailabilityStatus(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class PayoutStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"


class StaffType(str, Enum):
    INDIVIDUAL = "individual"
    GROUP_LEADER = "group-leader"
    OUTSOURCED = "outsourced"
    SALARIED = "salaried"


class InquiryStatus(str, Enum):
    NEW = "New"
    CONTACTED = "Contacted"
    HIRED = "Hired"
    REJECTED = "Rejected"


class GstType(str, Enum):
    GST = "gst"
    NON_GST = "non-gst"


# Roles that can be put on an event floor
WAITER_TIER_ROLES = frozenset(
    {
        Role.WAITER_STEWARD,
        Role.SUPERVISOR,
        Role.PRO,
        Role.SENIOR_PRO,
        Role.CAPTAIN_BUTLER,
    }
)

# Roles shown on the supervisor roster (supervisors are not rostered)
ROSTER_ROLES = WAITER_TIER_ROLES - {Role.SUPERVISOR}

STAFF_ROLES = frozenset(r for r in Role if r != Role.CONSUMER)

BACK_OFFICE_ROLES = frozenset(
    {
        Role.OPERATIONAL_MANAGER,
        Role.SALES,
        Role.HR,
        Role.ACCOUNTANT,
        Role.ADMIN,
    }
)
