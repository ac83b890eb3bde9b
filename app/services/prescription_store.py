"""
In-memory prescription store backed by a durable key-value slot.

The list held here is authoritative for the workflow; every ``replace`` writes
the whole collection back as a JSON array.  Callers receive copies, so a
record can only change through ``replace``.
"""

import json
import logging
from typing import Callable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..core.exceptions import NotFoundError
from ..schemas.prescription import Prescription
from .seed import seed_prescriptions
from .storage import PrescriptionStorage

logger = logging.getLogger(__name__)


class PrescriptionStore:
    def __init__(
        self,
        storage: PrescriptionStorage,
        seed: Callable[[], List[Prescription]] = seed_prescriptions,
    ):
        self.storage = storage
        self._seed = seed
        self._prescriptions: List[Prescription] = self._load()

    def _load(self) -> List[Prescription]:
        raw = self.storage.load()
        if raw is not None:
            try:
                data = json.loads(raw)
                if not isinstance(data, list):
                    raise ValueError("stored prescriptions are not a JSON array")
                return [Prescription.model_validate(record) for record in data]
            except (ValueError, PydanticValidationError) as e:
                logger.warning(f"Stored prescriptions are unreadable, reseeding: {str(e)}")
        else:
            logger.info("No stored prescriptions found, seeding")

        prescriptions = self._seed()
        self._save(prescriptions)
        return prescriptions

    def _save(self, prescriptions: List[Prescription]) -> None:
        self.storage.save(json.dumps([p.model_dump(mode="json") for p in prescriptions]))

    def get_all(self, status: Optional[str] = None, search: Optional[str] = None) -> List[Prescription]:
        """Return prescriptions matching the status and search filters.

        ``status`` of ``None``, ``""`` or ``"all"`` disables status filtering.
        ``search`` matches patient name or prescription id, case-insensitively.
        """
        prescriptions = self._prescriptions

        if status and status != "all":
            prescriptions = [p for p in prescriptions if p.status.value == status]

        if search:
            needle = search.lower()
            prescriptions = [
                p for p in prescriptions
                if needle in p.patient_name.lower() or needle in p.prescription_id.lower()
            ]

        return [p.model_copy(deep=True) for p in prescriptions]

    def get_by_id(self, prescription_id: str) -> Prescription:
        for prescription in self._prescriptions:
            if prescription.prescription_id == prescription_id:
                return prescription.model_copy(deep=True)
        raise NotFoundError(prescription_id)

    def replace(self, prescription_id: str, updated: Prescription) -> Prescription:
        for index, prescription in enumerate(self._prescriptions):
            if prescription.prescription_id == prescription_id:
                break
        else:
            raise NotFoundError(prescription_id)

        prescriptions = list(self._prescriptions)
        prescriptions[index] = updated.model_copy(deep=True)
        # Memory is only updated once the write succeeds
        self._save(prescriptions)
        self._prescriptions = prescriptions
        return updated.model_copy(deep=True)

    def dispense_ids(self) -> set:
        return {p.dispense_id for p in self._prescriptions if p.dispense_id}
