from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import Column, JSON, UniqueConstraint
from sqlmodel import Field, SQLModel


SEED_COMPOUND_NAME = "P4-t-Bu"
SUPERBASE_PKA_THRESHOLD = 25


class CompoundBase(SQLModel):
    """Columns shared by compound rows and the recent compounds view."""
    name: str = Field(max_length=255)
    formula: Optional[str] = Field(default=None, max_length=255)
    synthesis_notes: Optional[str] = Field(default=None)


class ChemicalCompound(CompoundBase, table=True):
    """A compound keyed by its unique name."""
    __tablename__ = "chemical_compounds"
    __table_args__ = (UniqueConstraint("name", name="unique_compound_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    properties: Dict[str, Any] = Field(
        default_factory=dict, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CompoundProperty(SQLModel, table=True):
    """One attribute of a compound, mirrored from its properties map."""
    __tablename__ = "compound_properties"
    __table_args__ = (UniqueConstraint(
        "compound_id", "attribute", name="unique_compound_attribute"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    compound_id: int = Field(foreign_key="chemical_compounds.id", index=True)
    attribute: str = Field(max_length=100)
    value: Any = Field(default=None, sa_column=Column(JSON))


class RecentCompound(CompoundBase, table=True):
    """
    Precomputed read projection of chemical_compounds.

    Rows are only rewritten by refresh_recent_compounds; writes to the
    compound tables are not visible here until the next refresh.
    """
    __tablename__ = "mv_recent_compounds"

    id: int = Field(primary_key=True)
    properties: Dict[str, Any] = Field(
        default_factory=dict, sa_column=Column(JSON))
    created_at: datetime
    updated_at: datetime = Field(index=True)
