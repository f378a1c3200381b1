"""Hostel domain dataclasses built from API payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _record_id(data: dict[str, Any]) -> str:
    return _str(data.get("_id") or data.get("id"))


@dataclass
class Hostel:
    name: str
    category: str
    total_rooms: int
    max_capacity: int

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Hostel":
        return cls(
            name=_str(data.get("name")),
            category=_str(data.get("category")),
            total_rooms=_int(data.get("totalRooms")),
            max_capacity=_int(data.get("maxCapacity")),
        )

    def to_api(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category,
            "totalRooms": self.total_rooms,
            "maxCapacity": self.max_capacity,
        }


@dataclass
class Room:
    number: str
    sharing_type: str
    total_beds: int
    available_beds: int
    rent: int

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Room":
        return cls(
            number=_str(data.get("roomNumber")),
            sharing_type=_str(data.get("sharingType")),
            total_beds=_int(data.get("totalBeds")),
            available_beds=_int(data.get("availableBeds")),
            rent=_int(data.get("rent")),
        )

    def to_api(self) -> dict[str, Any]:
        return {
            "roomNumber": self.number,
            "sharingType": self.sharing_type,
            "totalBeds": self.total_beds,
            "availableBeds": self.available_beds,
            "rent": self.rent,
        }

    @property
    def occupied_beds(self) -> int:
        return max(0, self.total_beds - self.available_beds)


@dataclass
class Tenant:
    id: str
    name: str
    room_number: str
    contact: str = ""
    email: str = ""
    rent_amount: float = 0.0
    move_in_date: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Tenant":
        return cls(
            id=_record_id(data),
            name=_str(data.get("tenantName") or data.get("name")),
            room_number=_str(data.get("roomNumber")),
            contact=_str(data.get("contact")),
            email=_str(data.get("email")),
            rent_amount=_float(data.get("rentAmount")),
            move_in_date=_str(data.get("moveInDate")),
        )


@dataclass
class TenantPage:
    tenants: list[Tenant]
    total: int

    @classmethod
    def from_api(cls, data: Any) -> "TenantPage":
        if isinstance(data, list):
            rows = data
            total = len(data)
        elif isinstance(data, dict) and isinstance(data.get("tenants"), list):
            rows = data["tenants"]
            total = _int(
                data.get("total") or data.get("count") or len(rows), len(rows)
            )
        else:
            return cls(tenants=[], total=0)
        tenants = [Tenant.from_api(t) for t in rows if isinstance(t, dict)]
        return cls(tenants=tenants, total=total)


@dataclass
class Payment:
    id: str
    tenant_id: str
    rent_amount: float
    due_amount: float
    payment_date: str
    due_date: str
    payment_mode: str
    transaction_id: str
    rent_status: str
    remarks: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Payment":
        return cls(
            id=_record_id(data),
            tenant_id=_str(data.get("tenantId")),
            rent_amount=_float(data.get("rentAmount")),
            due_amount=_float(data.get("dueAmount")),
            payment_date=_str(data.get("paymentDate")),
            due_date=_str(data.get("dueDate")),
            payment_mode=_str(data.get("paymentMode")),
            transaction_id=_str(data.get("transactionId")),
            rent_status=_str(data.get("rentStatus")),
            remarks=_str(data.get("remarks")),
        )


@dataclass
class MaintenanceIssue:
    id: str
    room_no: str
    issue: str
    status: str = "Pending"
    priority: str = "Medium"
    remarks: str = ""
    requested_by: str = ""
    assigned_to: str = ""
    created_date: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "MaintenanceIssue":
        return cls(
            id=_record_id(data),
            room_no=_str(data.get("roomNo")),
            issue=_str(data.get("issue")),
            status=_str(data.get("status") or "Pending"),
            priority=_str(data.get("priority") or "Medium"),
            remarks=_str(data.get("remarks")),
            requested_by=_str(data.get("requestedBy")),
            assigned_to=_str(data.get("assignedTo")),
            created_date=_str(data.get("createdDate")),
        )

    @property
    def resolved(self) -> bool:
        return self.status.lower() in {"resolved", "completed", "closed"}


@dataclass
class DashboardStats:
    rooms_total: int = 0
    rooms_occupied: int = 0
    rooms_vacant: int = 0
    payments_paid: int = 0
    payments_unpaid: int = 0
    tenants_total: int = 0
    tenants_current: int = 0
    tickets_total: int = 0
    tickets_unresolved: int = 0

    @classmethod
    def from_api(cls, data: Any) -> "DashboardStats":
        if not isinstance(data, dict):
            return cls()

        def section(name: str) -> dict[str, Any]:
            value = data.get(name)
            return value if isinstance(value, dict) else {}

        rooms = section("rooms")
        payments = section("payments")
        tenants = section("tenants")
        tickets = section("tickets")
        return cls(
            rooms_total=_int(rooms.get("total")),
            rooms_occupied=_int(rooms.get("occupied")),
            rooms_vacant=_int(rooms.get("vacant")),
            payments_paid=_int(payments.get("paid")),
            payments_unpaid=_int(payments.get("unpaid")),
            tenants_total=_int(tenants.get("total")),
            tenants_current=_int(tenants.get("current")),
            tickets_total=_int(tickets.get("total")),
            tickets_unresolved=_int(tickets.get("unresolved")),
        )


@dataclass
class MessMenu:
    breakfast: list[str] = field(default_factory=list)
    lunch: list[str] = field(default_factory=list)
    dinner: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Any) -> "MessMenu":
        if not isinstance(data, dict):
            return cls()

        def items(name: str) -> list[str]:
            value = data.get(name)
            if isinstance(value, str):
                return [value] if value else []
            if not isinstance(value, list):
                return []
            return [str(v) for v in value if v]

        return cls(
            breakfast=items("breakfast"), lunch=items("lunch"), dinner=items("dinner")
        )


@dataclass
class Dashboard:
    hostel: Hostel | None
    stats: DashboardStats
    mess: MessMenu


@dataclass
class Profile:
    name: str
    email: str
    avatar: str = ""

    @classmethod
    def from_api(cls, data: Any) -> "Profile":
        if isinstance(data, dict) and isinstance(data.get("profileInfo"), dict):
            data = data["profileInfo"]
        if not isinstance(data, dict):
            return cls(name="", email="")
        return cls(
            name=_str(data.get("name") or data.get("username")),
            email=_str(data.get("email")),
            avatar=_str(data.get("avatar")),
        )


@dataclass
class Feedback:
    name: str
    rating: float
    comment: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Feedback":
        return cls(
            name=_str(data.get("name") or data.get("userName")),
            rating=_float(data.get("rating")),
            comment=_str(data.get("comment") or data.get("review")),
        )
