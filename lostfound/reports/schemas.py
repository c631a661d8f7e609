"""
Defines the data models and enums for missing and sighting reports.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from enum import Enum
from typing import Optional, List, Dict, Any


class ReportType(str, Enum):
    person = "person"
    pet = "pet"
    document = "document"
    electronics = "electronics"
    vehicle = "vehicle"
    other = "other"


class ReportSource(str, Enum):
    missing = "missing"
    sighting = "sighting"


class ReportStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class ReactionType(str, Enum):
    support = "support"
    prayer = "prayer"
    hope = "hope"
    share = "share"
    seen = "seen"


# Detail fields a submission must carry, per source and subject type
REQUIRED_DETAILS: Dict[str, Dict[str, List[str]]] = {
    ReportSource.missing.value: {
        ReportType.person.value: ["first_name", "last_name"],
        ReportType.pet.value: ["pet_name", "pet_type"],
        ReportType.document.value: ["document_type"],
        ReportType.electronics.value: ["device_type", "device_brand"],
        ReportType.vehicle.value: ["vehicle_type", "vehicle_brand"],
        ReportType.other.value: ["item_name"],
    },
    ReportSource.sighting.value: {
        ReportType.person.value: [],
        ReportType.pet.value: ["pet_type"],
        ReportType.document.value: ["document_type"],
        ReportType.electronics.value: ["device_type"],
        ReportType.vehicle.value: ["vehicle_type"],
        ReportType.other.value: ["item_name"],
    },
}


def missing_details(source: str, type: str, details: Dict[str, Any]) -> List[str]:
    return [name for name in REQUIRED_DETAILS[source][type] if not str(details.get(name) or "").strip()]


class Coordinates(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class ReportCreate(BaseModel):
    type: ReportType
    source: ReportSource = ReportSource.missing
    city: str
    location: str
    coordinates: Optional[Coordinates] = None
    additional_info: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)
    reporter_first_name: Optional[str] = None
    reporter_last_name: Optional[str] = None
    reporter_phone: Optional[str] = None
    reporter_email: Optional[str] = None
    linked_report_id: Optional[str] = None  # sighting of an existing missing report

    @field_validator("city", "location")
    @classmethod
    def not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("This field is required")
        return v

    @model_validator(mode="after")
    def check_required_details(self):
        missing = missing_details(self.source.value, self.type.value, self.details)
        if missing:
            raise ValueError(f"Missing required fields for {self.type.value} report: {', '.join(missing)}")
        if self.source == ReportSource.sighting and not (self.reporter_phone or "").strip():
            raise ValueError("Missing required field: reporter_phone")
        return self


class ReportUpdate(BaseModel):
    """Owner edits. Omitted fields keep their value; details are merged key by key."""
    city: Optional[str] = None
    location: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    additional_info: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    reporter_first_name: Optional[str] = None
    reporter_last_name: Optional[str] = None
    reporter_phone: Optional[str] = None
    reporter_email: Optional[str] = None
    resubmit: bool = False  # send a rejected report back for review

    @field_validator("city", "location")
    @classmethod
    def not_blank(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("This field cannot be emptied")
        return v


class Report(BaseModel):
    id: str
    user_id: str
    type: ReportType
    source: ReportSource
    status: ReportStatus
    city: str
    location: str
    coordinates: Optional[Coordinates] = None
    additional_info: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)
    photos: List[str] = Field(default_factory=list)
    reporter_first_name: Optional[str] = None
    reporter_last_name: Optional[str] = None
    reporter_phone: Optional[str] = None
    reporter_email: Optional[str] = None
    linked_report_id: Optional[str] = None
    rejection_reason: Optional[str] = None
    reviewed_at: Optional[str] = None
    reviewed_by: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = None


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    totalPages: int


class ReportPage(BaseModel):
    reports: List[Report]
    pagination: Pagination


class ReactionCreate(BaseModel):
    reaction_type: ReactionType


class ReactionSummary(BaseModel):
    counts: Dict[str, int]
    total: int
    user_reactions: List[str]


class ReportSummary(BaseModel):
    total_reports: int
    pending: int
    approved: int
    rejected: int
