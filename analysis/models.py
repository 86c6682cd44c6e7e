"""
analysis/models.py -- Domain dataclass for stored diagnostic analyses.

Pure data container with zero logic. Counting and ordering live in
analysis/store.py.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class Analysis:
    """One diagnostic run over a patient's scan or signal.

    results is the model output as a JSON object. results["diagnosis"] is
    the label the category counts match against (e.g. "Malignant",
    "Seizure"); the store copies it into its own column on insert.

    id is None before the record is written to the database.
    """

    patient_name: str
    analysis_type: str  # free text, e.g. "skin-cancer", "eeg"
    results: dict[str, Any] = field(default_factory=dict)
    id: Optional[int] = None
    user_email: Optional[str] = None
    created_at: str = ""  # ISO 8601 UTC, set by store on insert unless given

    @property
    def diagnosis(self) -> str:
        return str(self.results.get("diagnosis") or "")
