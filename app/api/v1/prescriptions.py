from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from typing import List, Optional

from ...api.deps import (
    get_dispense_workflow, get_prescription_store, require_capability
)
from ...core.permissions import (
    DISPENSE_PRESCRIPTIONS, FULFILL_PRESCRIPTIONS, READ_PRESCRIPTIONS
)
from ...core.security import Identity
from ...schemas.prescription import (
    Attachment, DispenseResponse, FulfillRequest, PrescriptionListResponse,
    PrescriptionResponse
)
from ...services.dispense_service import DispenseWorkflow
from ...services.prescription_store import PrescriptionStore

router = APIRouter(prefix="/prescriptions", tags=["Prescriptions"])

async def _to_attachments(files: Optional[List[UploadFile]]) -> List[Attachment]:
    """Describe uploaded files by name, MIME type and byte size."""
    attachments = []
    for upload in files or []:
        size = upload.size
        if size is None:
            size = len(await upload.read())
        attachments.append(Attachment(
            filename=upload.filename or "unnamed",
            content_type=upload.content_type or "application/octet-stream",
            size=size,
        ))
    return attachments

@router.get("", response_model=PrescriptionListResponse)
async def list_prescriptions(
    status: Optional[str] = Query(None, description="Pending, Dispensed or all"),
    search: Optional[str] = Query(None, description="Patient name or prescription id"),
    store: PrescriptionStore = Depends(get_prescription_store),
    _: Identity = Depends(require_capability(READ_PRESCRIPTIONS))
):
    """List prescriptions, optionally filtered."""
    prescriptions = store.get_all(status=status, search=search)
    return PrescriptionListResponse(prescriptions=prescriptions, total=len(prescriptions))

@router.get("/{prescription_id}", response_model=PrescriptionResponse)
async def get_prescription(
    prescription_id: str,
    store: PrescriptionStore = Depends(get_prescription_store),
    _: Identity = Depends(require_capability(READ_PRESCRIPTIONS))
):
    """Get a single prescription."""
    return PrescriptionResponse(prescription=store.get_by_id(prescription_id))

@router.post("/{prescription_id}/fulfill", response_model=PrescriptionResponse)
async def fulfill_prescription(
    prescription_id: str,
    fulfill_data: FulfillRequest,
    workflow: DispenseWorkflow = Depends(get_dispense_workflow),
    current_user: Identity = Depends(require_capability(FULFILL_PRESCRIPTIONS))
):
    """Mark a pending prescription as fulfilled."""
    prescription = workflow.mark_fulfilled(
        prescription_id, fulfill_data, actor=current_user.user_id
    )
    return PrescriptionResponse(prescription=prescription)

@router.post("/{prescription_id}/dispense", response_model=DispenseResponse)
async def upload_dispense_details(
    prescription_id: str,
    dispense_items: str = Form(...),
    photos: Optional[List[UploadFile]] = File(None),
    documents: Optional[List[UploadFile]] = File(None),
    workflow: DispenseWorkflow = Depends(get_dispense_workflow),
    current_user: Identity = Depends(require_capability(DISPENSE_PRESCRIPTIONS))
):
    """Upload per-medicine dispense details with optional photos and PDFs."""
    prescription = workflow.upload_dispense_details(
        prescription_id,
        dispense_items,
        photos=await _to_attachments(photos),
        documents=await _to_attachments(documents),
        actor=current_user.user_id,
    )
    return DispenseResponse(prescription=prescription, dispense_id=prescription.dispense_id)
