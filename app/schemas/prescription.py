import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class PrescriptionStatus(str, Enum):
    PENDING = "Pending"
    DISPENSED = "Dispensed"


class Priority(str, Enum):
    NORMAL = "Normal"
    HIGH = "High"
    URGENT = "Urgent"


class DispenseItem(BaseModel):
    """One dispensed medicine line, as committed to a prescription."""
    medicine_id: str
    medicine_name: str
    dispensed_qty: int = Field(..., gt=0)
    batch_no: str = Field(..., min_length=1)
    expiry_date: datetime.date


class DispenseItemIn(BaseModel):
    """A dispense line as submitted; rules are checked by the workflow, not here."""
    medicine_id: str = ""
    medicine_name: str = ""
    dispensed_qty: int = 0
    batch_no: str = ""
    expiry_date: str = ""

    @field_validator("batch_no", "expiry_date", "medicine_id", "medicine_name", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return "" if value is None else value


class Attachment(BaseModel):
    filename: str
    content_type: str
    size: int = Field(..., ge=0)


class Prescription(BaseModel):
    prescription_id: str = Field(..., min_length=1)
    patient_id: str
    patient_name: str
    medicines: List[str] = Field(default_factory=list)
    status: PrescriptionStatus = PrescriptionStatus.PENDING
    date: datetime.date
    doctor: Optional[str] = None
    priority: Optional[Priority] = None
    notes: Optional[str] = None

    # Set by the "mark fulfilled" transition
    fulfilled_by: Optional[str] = None
    fulfilled_date: Optional[datetime.date] = None
    fulfilled_notes: Optional[str] = None

    # Set by the "upload dispense details" transition
    dispense_id: Optional[str] = None
    dispense_items: List[DispenseItem] = Field(default_factory=list)
    attachments: List[Attachment] = Field(default_factory=list)
    dispense_uploaded_at: Optional[datetime.datetime] = None


class FulfillRequest(BaseModel):
    fulfilled_by: str = ""
    fulfilled_date: str = ""
    notes: Optional[str] = None

    @field_validator("fulfilled_by", "fulfilled_date", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return "" if value is None else value


class PrescriptionResponse(BaseModel):
    prescription: Prescription


class PrescriptionListResponse(BaseModel):
    prescriptions: List[Prescription]
    total: int


class DispenseResponse(BaseModel):
    prescription: Prescription
    dispense_id: str
    message: str = "Dispense details uploaded successfully"


class AnalyticsEvent(BaseModel):
    event: str
    properties: Dict[str, Any] = Field(default_factory=dict)
    user_id: Optional[str] = None
    timestamp: datetime.datetime
