from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class CompoundForm(BaseModel):
    """Raw add/update form submission; every field arrives as a string."""
    name: str = Field("", description="Unique compound name, e.g. 'P4-t-Bu'.")
    formula: str = Field("", description="Molecular formula, e.g. 'C32H60N4P'.")
    pKa: str = Field("", description="pKa as typed into the form.")
    energy: str = Field("", description="Energy in eV as typed into the form.")
    geometry: str = Field("", description="Free-text geometry description.")
    notes: str = Field("", description="Synthesis notes.")


class CompoundRead(BaseModel):
    id: int
    name: str
    formula: Optional[str] = None
    properties: Dict[str, Any] = {}
    synthesis_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def pka(self) -> Optional[float]:
        return numeric_property(self.properties, "pKa")

    @property
    def energy_ev(self) -> Optional[float]:
        return numeric_property(self.properties, "energy_eV")


class CompoundList(BaseModel):
    compounds: List[CompoundRead]


def numeric_property(properties: Dict[str, Any], attribute: str) -> Optional[float]:
    """Return a numeric property value, or None when absent or not a number."""
    value = (properties or {}).get(attribute)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)
