"""Assignment schemas"""

from typing import List, Optional

from pydantic import BaseModel


class AssignedStaff(BaseModel):
    id: str
    name: str
    role: str
    phone: Optional[str] = None


class AssignmentCandidate(AssignedStaff):
    assignmentCount: int
    availability: str  # available | unavailable | unknown
    assignable: bool


class AssignmentBoard(BaseModel):
    orderId: str
    date: str
    status: str
    assigned: List[AssignedStaff] = []
    candidates: List[AssignmentCandidate] = []
