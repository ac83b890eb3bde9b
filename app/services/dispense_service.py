"""
Pharmacy dispense workflow.

A prescription moves from Pending to Dispensed exactly once, either through a
plain "mark fulfilled" or through an upload of per-medicine dispense details
with optional photos and PDF documents.  Input is validated in full before
anything is written: every violated rule is reported together in a single
``ValidationError``, and the store sees at most one ``replace`` per call.
"""

import json
import logging
import random
from datetime import date, datetime
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from ..core.config import settings
from ..core.exceptions import ConflictError, ValidationError
from ..schemas.prescription import (
    Attachment,
    DispenseItem,
    DispenseItemIn,
    FulfillRequest,
    Prescription,
    PrescriptionStatus,
)
from .analytics import Analytics
from .prescription_store import PrescriptionStore

logger = logging.getLogger(__name__)

DISPENSE_ID_SPACE = range(1000, 10000)


def parse_date(value: str) -> Optional[date]:
    """Parse an ISO date or datetime string; None if it is neither."""
    value = (value or "").strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def decode_dispense_items(raw: Union[str, Sequence[Any]]) -> Tuple[Optional[List[Optional[DispenseItemIn]]], List[str]]:
    """Decode submitted dispense lines without raising.

    ``raw`` is the ``dispense_items`` form field (a JSON array string) or an
    already decoded sequence of dicts or ``DispenseItemIn``.  Returns the
    lines, with ``None`` in place of each malformed entry, and the errors
    found.  The lines are ``None`` when ``raw`` is not an array at all.
    """
    data = raw
    if isinstance(raw, str):
        try:
            data = json.loads(raw or "[]")
        except ValueError:
            return None, ["Dispense items must be a JSON array"]
    if not isinstance(data, (list, tuple)):
        return None, ["Dispense items must be a JSON array"]

    items = []
    errors = []
    for index, entry in enumerate(data, start=1):
        try:
            items.append(DispenseItemIn.model_validate(entry))
        except PydanticValidationError as e:
            items.append(None)
            for err in e.errors():
                field = ".".join(str(part) for part in err["loc"]) or "item"
                errors.append(f"Item {index}: {field} {err['msg'].lower()}")
    return items, errors


class DispenseWorkflow:
    def __init__(
        self,
        store: PrescriptionStore,
        analytics: Optional[Analytics] = None,
        clock: Callable[[], datetime] = datetime.now,
        max_photos: int = settings.MAX_PHOTOS,
        max_photo_size: int = settings.MAX_PHOTO_SIZE,
        max_document_size: int = settings.MAX_DOCUMENT_SIZE,
    ):
        self.store = store
        self.analytics = analytics or Analytics(clock=clock)
        self.clock = clock
        self.max_photos = max_photos
        self.max_photo_size = max_photo_size
        self.max_document_size = max_document_size

    def _require_pending(self, prescription: Prescription) -> None:
        if prescription.status != PrescriptionStatus.PENDING:
            raise ConflictError(
                f"Prescription {prescription.prescription_id} is already {prescription.status.value}"
            )

    def mark_fulfilled(self, prescription_id: str, request: FulfillRequest, actor: Optional[str] = None) -> Prescription:
        """Move a Pending prescription to Dispensed without dispense details."""
        self.analytics.fulfill_request(prescription_id, actor)
        try:
            prescription = self.store.get_by_id(prescription_id)
            self._require_pending(prescription)

            errors = []
            if not request.fulfilled_by.strip():
                errors.append("Fulfilled by is required")
            fulfilled_date = parse_date(request.fulfilled_date)
            if not request.fulfilled_date.strip():
                errors.append("Fulfillment date is required")
            elif fulfilled_date is None:
                errors.append("Fulfillment date is not a valid date")
            if errors:
                raise ValidationError(errors)

            updated = prescription.model_copy(update={
                "status": PrescriptionStatus.DISPENSED,
                "fulfilled_by": request.fulfilled_by.strip(),
                "fulfilled_date": fulfilled_date,
                "fulfilled_notes": request.notes or None,
            })
            result = self.store.replace(prescription_id, updated)
        except Exception as e:
            self.analytics.fulfill_failure(prescription_id, str(e), actor)
            logger.info(f"Fulfilment of {prescription_id} rejected: {str(e)}")
            raise

        self.analytics.fulfill_success(prescription_id, actor)
        logger.info(f"Prescription {prescription_id} marked fulfilled by {result.fulfilled_by}")
        return result

    def validate_items(self, prescription: Prescription, items: Sequence[Optional[DispenseItemIn]]) -> List[str]:
        """Field rules for each line; ``None`` entries were already reported as malformed."""
        errors = []
        expected = len(prescription.medicines)
        if len(items) != expected:
            errors.append(f"Expected {expected} dispense items, got {len(items)}")

        today = self.clock().date()
        for index, item in enumerate(items, start=1):
            if item is None:
                continue
            if item.dispensed_qty <= 0:
                errors.append(f"Item {index}: Quantity must be positive")
            if not item.batch_no.strip():
                errors.append(f"Item {index}: Batch number is required")
            if not item.expiry_date.strip():
                errors.append(f"Item {index}: Expiry date is required")
            else:
                expiry = parse_date(item.expiry_date)
                if expiry is None:
                    errors.append(f"Item {index}: Expiry date is not a valid date")
                elif expiry <= today:
                    errors.append(f"Item {index}: Expiry date must be in the future")
        return errors

    def validate_attachments(self, photos: Sequence[Attachment], documents: Sequence[Attachment]) -> List[str]:
        errors = []
        if len(photos) > self.max_photos:
            errors.append(f"A maximum of {self.max_photos} photos can be attached")
        for photo in photos:
            if photo.size > self.max_photo_size:
                errors.append(f"{photo.filename} is too large (max {self.max_photo_size // (1024 * 1024)}MB)")
            if not photo.content_type.startswith("image/"):
                errors.append(f"{photo.filename} is not a valid image")
        for document in documents:
            if document.size > self.max_document_size:
                errors.append(f"{document.filename} is too large (max {self.max_document_size // (1024 * 1024)}MB)")
            if document.content_type != "application/pdf":
                errors.append(f"{document.filename} is not a PDF file")
        return errors

    def new_dispense_id(self) -> str:
        """Random ``D-####`` id not already used by any stored prescription."""
        taken = self.store.dispense_ids()
        for _ in range(100):
            candidate = f"D-{random.choice(DISPENSE_ID_SPACE)}"
            if candidate not in taken:
                return candidate
        free = [n for n in DISPENSE_ID_SPACE if f"D-{n}" not in taken]
        if not free:
            raise ConflictError("No dispense identifiers left")
        return f"D-{random.choice(free)}"

    def upload_dispense_details(
        self,
        prescription_id: str,
        items: Union[str, Sequence[Any]],
        photos: Sequence[Attachment] = (),
        documents: Sequence[Attachment] = (),
        actor: Optional[str] = None,
    ) -> Prescription:
        """Record dispense details and move a Pending prescription to Dispensed.

        ``items`` may be the raw JSON form field or a sequence of lines; it is
        decoded only once the prescription is known to exist and be Pending.
        """
        self.analytics.dispense_upload_start(prescription_id, actor)
        try:
            prescription = self.store.get_by_id(prescription_id)
            self._require_pending(prescription)

            items, errors = decode_dispense_items(items)
            if items is not None:
                errors.extend(self.validate_items(prescription, items))
            errors.extend(self.validate_attachments(photos, documents))
            if errors:
                raise ValidationError(errors)

            dispense_items = [
                DispenseItem(
                    medicine_id=item.medicine_id or f"med_{index}",
                    medicine_name=medicine,
                    dispensed_qty=item.dispensed_qty,
                    batch_no=item.batch_no.strip(),
                    expiry_date=parse_date(item.expiry_date),
                )
                for index, (item, medicine) in enumerate(zip(items, prescription.medicines))
            ]
            updated = prescription.model_copy(update={
                "status": PrescriptionStatus.DISPENSED,
                "dispense_id": self.new_dispense_id(),
                "dispense_items": dispense_items,
                "attachments": [*photos, *documents],
                "dispense_uploaded_at": self.clock(),
            })
            result = self.store.replace(prescription_id, updated)
        except Exception as e:
            self.analytics.dispense_upload_failure(prescription_id, str(e), actor)
            logger.info(f"Dispense upload for {prescription_id} rejected: {str(e)}")
            raise

        self.analytics.dispense_upload_success(prescription_id, result.dispense_id, actor)
        logger.info(f"Prescription {prescription_id} dispensed as {result.dispense_id}")
        return result
