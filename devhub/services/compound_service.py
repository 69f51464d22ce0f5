import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select, desc

from devhub.models.compound import (
    ChemicalCompound,
    CompoundProperty,
    RecentCompound,
    SEED_COMPOUND_NAME,
    SUPERBASE_PKA_THRESHOLD,
)
from devhub.schemas.compound import CompoundForm
from devhub.services.error_handler import QueryError, ValidationError

logger = logging.getLogger(__name__)

SEED_COMPOUND = {
    "name": SEED_COMPOUND_NAME,
    "formula": "C32H60N4P",
    "properties": {
        "pKa": 42,
        "energy_eV": 0.85,
        "geometry": "bulky phosphazene, superbasic",
        "is_superbase": True,
    },
    "synthesis_notes": "Handle under inert atmosphere.",
}


def is_superbase(pka: Optional[float]) -> bool:
    """A compound is a superbase when its pKa is known and above 25."""
    return pka is not None and pka > SUPERBASE_PKA_THRESHOLD


def parse_number(raw: str, field: str) -> Optional[float]:
    """Parse a numeric form field; an empty field means absent, not zero."""
    raw = (raw or "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError as e:
        raise ValidationError(f"{field} must be a number") from e


def build_properties(form: CompoundForm) -> Dict[str, Any]:
    """Normalize the form into a properties map holding only present values."""
    pka = parse_number(form.pKa, "pKa")
    energy = parse_number(form.energy, "energy")
    candidates = {
        "pKa": pka,
        "energy_eV": energy,
        "geometry": form.geometry or None,
        "is_superbase": is_superbase(pka),
    }
    return {key: value for key, value in candidates.items() if value is not None}


class CompoundService:
    """Service for reading and writing compounds."""

    def __init__(self, db: Session):
        self.db = db

    async def list_recent(self) -> List[RecentCompound]:
        """Return every row of the recent compounds view, newest first."""
        try:
            statement = select(RecentCompound).order_by(
                desc(RecentCompound.updated_at), desc(RecentCompound.id))
            return list(self.db.exec(statement).all())
        except SQLAlchemyError as e:
            raise QueryError(str(e)) from e

    async def get_by_name(self, name: str) -> Optional[ChemicalCompound]:
        statement = select(ChemicalCompound).where(ChemicalCompound.name == name)
        return self.db.exec(statement).first()

    async def save_compound(self, form: CompoundForm) -> ChemicalCompound:
        """
        Upsert a compound from a raw form submission.

        The compound row and its property rows are committed separately. If
        the property write fails the compound row keeps the new values while
        its property rows stay as they were; nothing is rolled back and the
        recent compounds view is not refreshed.
        """
        if not form.name or not form.name.strip():
            raise ValidationError("Name is required")

        properties = build_properties(form)

        compound = await self._upsert_compound(
            name=form.name,
            formula=form.formula or None,
            properties=properties,
            synthesis_notes=form.notes or None,
        )
        await self._upsert_properties(compound.id, properties)
        await self.refresh_recent_compounds()
        self.db.refresh(compound)

        logger.info(
            f"Saved compound {compound.name} (id={compound.id}) with {len(properties)} properties")
        return compound

    async def insert_seed(self) -> ChemicalCompound:
        """Insert the seed compound; fails if a compound with its name exists."""
        compound = ChemicalCompound(
            name=SEED_COMPOUND["name"],
            formula=SEED_COMPOUND["formula"],
            properties=dict(SEED_COMPOUND["properties"]),
            synthesis_notes=SEED_COMPOUND["synthesis_notes"],
        )
        try:
            self.db.add(compound)
            self.db.commit()
            self.db.refresh(compound)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise QueryError(
                f"Failed to insert {SEED_COMPOUND_NAME}: {e}") from e

        try:
            for attribute, value in SEED_COMPOUND["properties"].items():
                self.db.add(CompoundProperty(
                    compound_id=compound.id, attribute=attribute, value=value))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise QueryError(
                f"Failed to write properties for {SEED_COMPOUND_NAME}: {e}") from e

        await self.refresh_recent_compounds()
        self.db.refresh(compound)
        logger.info(f"Inserted seed compound {SEED_COMPOUND_NAME} (id={compound.id})")
        return compound

    async def refresh_recent_compounds(self) -> int:
        """Rebuild the recent compounds view from the compound table."""
        try:
            compounds = self.db.exec(select(ChemicalCompound)).all()
            current = {row.id: row for row in self.db.exec(select(RecentCompound)).all()}

            for compound in compounds:
                row = current.pop(compound.id, None) or RecentCompound(
                    id=compound.id, created_at=compound.created_at,
                    updated_at=compound.updated_at, name=compound.name)
                row.name = compound.name
                row.formula = compound.formula
                row.properties = dict(compound.properties or {})
                row.synthesis_notes = compound.synthesis_notes
                row.created_at = compound.created_at
                row.updated_at = compound.updated_at
                self.db.add(row)

            for stale in current.values():
                self.db.delete(stale)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise QueryError(f"Failed to refresh recent compounds: {e}") from e

        logger.debug(f"Refreshed recent compounds view ({len(compounds)} rows)")
        return len(compounds)

    async def _upsert_compound(
        self,
        name: str,
        formula: Optional[str],
        properties: Dict[str, Any],
        synthesis_notes: Optional[str],
    ) -> ChemicalCompound:
        try:
            compound = await self.get_by_name(name)
            if compound is None:
                compound = ChemicalCompound(name=name)
            compound.formula = formula
            compound.properties = properties
            compound.synthesis_notes = synthesis_notes
            compound.updated_at = datetime.now(timezone.utc)

            self.db.add(compound)
            self.db.commit()
            self.db.refresh(compound)
            return compound
        except SQLAlchemyError as e:
            self.db.rollback()
            raise QueryError(f"Failed to save compound {name}: {e}") from e

    async def _upsert_properties(self, compound_id: int, properties: Dict[str, Any]) -> None:
        if not properties:
            return

        try:
            existing = {
                row.attribute: row
                for row in self.db.exec(
                    select(CompoundProperty).where(
                        CompoundProperty.compound_id == compound_id)
                ).all()
            }
            for attribute, value in properties.items():
                row = existing.get(attribute) or CompoundProperty(
                    compound_id=compound_id, attribute=attribute)
                row.value = value
                self.db.add(row)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise QueryError(
                f"Failed to write properties for compound {compound_id}: {e}") from e
