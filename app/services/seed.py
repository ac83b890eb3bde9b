from typing import List

from ..schemas.prescription import Prescription

SEED_PRESCRIPTIONS = [
    {
        "prescription_id": "RX-2001",
        "patient_id": "P-1001",
        "patient_name": "Ravi Kumar",
        "medicines": ["Paracetamol 500mg - 1 tab 8hr", "Ibuprofen 200mg - 1 tab 12hr"],
        "status": "Pending",
        "date": "2025-09-10",
        "doctor": "Dr. Smith",
        "priority": "Normal",
    },
    {
        "prescription_id": "RX-2002",
        "patient_id": "P-1002",
        "patient_name": "Meena R.",
        "medicines": ["Cetirizine 10mg - 1 tab at night"],
        "status": "Pending",
        "date": "2025-09-12",
        "doctor": "Dr. Smith",
        "priority": "Normal",
    },
]


def seed_prescriptions() -> List[Prescription]:
    """Fresh copies of the records a new store starts from."""
    return [Prescription.model_validate(record) for record in SEED_PRESCRIPTIONS]
