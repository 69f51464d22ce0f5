from datetime import datetime, timezone

import pytest
from unittest.mock import AsyncMock, patch

from sqlmodel import Session, select

from devhub.models.compound import ChemicalCompound, CompoundProperty, RecentCompound
from devhub.schemas.compound import CompoundForm
from devhub.services.compound_service import (
    CompoundService,
    build_properties,
    is_superbase,
    parse_number,
)
from devhub.services.error_handler import QueryError, ValidationError


def properties_of(session: Session, compound_id: int) -> dict:
    rows = session.exec(select(CompoundProperty).where(CompoundProperty.compound_id == compound_id)).all()
    return {row.attribute: row.value for row in rows}


@pytest.mark.parametrize("pka, expected", [
    (25, False),
    (25.01, True),
    (42, True),
    (-3, False),
    (None, False),
])
def test_is_superbase_threshold(pka, expected):
    assert is_superbase(pka) is expected


def test_parse_number_treats_empty_as_absent():
    assert parse_number("", "pKa") is None
    assert parse_number("   ", "pKa") is None
    assert parse_number("0", "pKa") == 0.0
    assert parse_number("24.3", "pKa") == 24.3


def test_parse_number_rejects_text():
    with pytest.raises(ValidationError, match="energy must be a number"):
        parse_number("high", "energy")


def test_build_properties_skips_absent_values():
    assert build_properties(CompoundForm(name="X")) == {"is_superbase": False}
    assert build_properties(CompoundForm(name="X", pKa="42", geometry="tetrahedral")) == {
        "pKa": 42.0, "geometry": "tetrahedral", "is_superbase": True}


@pytest.mark.asyncio
async def test_save_compound_writes_both_tables_and_refreshes(session: Session):
    service = CompoundService(session)

    compound = await service.save_compound(CompoundForm(
        name="P4-t-Bu", formula="C32H60N4P", pKa="42", energy="0.85",
        geometry="bulky phosphazene, superbasic", notes="Handle under inert atmosphere."))

    assert compound.id is not None
    assert compound.properties == {
        "pKa": 42.0, "energy_eV": 0.85, "geometry": "bulky phosphazene, superbasic", "is_superbase": True}
    assert properties_of(session, compound.id) == compound.properties

    view = await service.list_recent()
    assert [row.name for row in view] == ["P4-t-Bu"]
    assert view[0].synthesis_notes == "Handle under inert atmosphere."


@pytest.mark.asyncio
async def test_save_compound_requires_name(session: Session):
    service = CompoundService(session)

    with pytest.raises(ValidationError, match="Name is required"):
        await service.save_compound(CompoundForm(name="  ", pKa="10"))

    assert session.exec(select(ChemicalCompound)).all() == []


@pytest.mark.asyncio
async def test_resave_updates_property_values_in_place(session: Session):
    service = CompoundService(session)
    first = await service.save_compound(CompoundForm(name="DBU", pKa="24.3"))
    await service.save_compound(CompoundForm(name="DBU", pKa="26"))

    rows = session.exec(select(CompoundProperty)).all()
    assert len(rows) == 2
    assert properties_of(session, first.id) == {"pKa": 26.0, "is_superbase": True}


@pytest.mark.asyncio
async def test_compound_write_failure_skips_properties_and_refresh(session: Session):
    service = CompoundService(session)

    with patch.object(service, "_upsert_compound", new_callable=AsyncMock) as mock_upsert, \
            patch.object(service, "_upsert_properties", new_callable=AsyncMock) as mock_props, \
            patch.object(service, "refresh_recent_compounds", new_callable=AsyncMock) as mock_refresh:
        mock_upsert.side_effect = QueryError("duplicate key value")

        with pytest.raises(QueryError):
            await service.save_compound(CompoundForm(name="DBU", pKa="24.3"))

        mock_props.assert_not_awaited()
        mock_refresh.assert_not_awaited()


@pytest.mark.asyncio
async def test_property_write_failure_leaves_stale_properties(session: Session):
    """
    The compound row and its property rows are separate commits. A failed
    property write keeps the new compound row and the old property rows, and
    the view is not refreshed.
    """
    service = CompoundService(session)
    original = await service.save_compound(CompoundForm(name="DBU", pKa="10"))

    with patch.object(service, "_upsert_properties", new_callable=AsyncMock) as mock_props:
        mock_props.side_effect = QueryError("connection reset")
        with pytest.raises(QueryError, match="connection reset"):
            await service.save_compound(CompoundForm(name="DBU", pKa="30"))

    compound = session.exec(select(ChemicalCompound).where(ChemicalCompound.name == "DBU")).one()
    assert compound.properties == {"pKa": 30.0, "is_superbase": True}
    assert properties_of(session, original.id) == {"pKa": 10.0, "is_superbase": False}

    view = session.exec(select(RecentCompound)).one()
    assert view.properties == {"pKa": 10.0, "is_superbase": False}


@pytest.mark.asyncio
async def test_refresh_recent_compounds_mirrors_compound_table(session: Session):
    service = CompoundService(session)
    session.add(ChemicalCompound(name="TBD", properties={"pKa": 26.0}))
    session.add(ChemicalCompound(name="DBU", properties={"pKa": 24.3}))
    session.commit()

    assert await service.list_recent() == []

    rows = await service.refresh_recent_compounds()

    assert rows == 2
    assert sorted(row.name for row in await service.list_recent()) == ["DBU", "TBD"]


@pytest.mark.asyncio
async def test_list_recent_orders_newest_first(session: Session):
    service = CompoundService(session)
    session.add(ChemicalCompound(name="Older", updated_at=datetime(2024, 1, 1, tzinfo=timezone.utc)))
    session.add(ChemicalCompound(name="Newest", updated_at=datetime(2024, 3, 1, tzinfo=timezone.utc)))
    session.add(ChemicalCompound(name="Middle", updated_at=datetime(2024, 2, 1, tzinfo=timezone.utc)))
    session.commit()
    await service.refresh_recent_compounds()

    assert [row.name for row in await service.list_recent()] == ["Newest", "Middle", "Older"]


@pytest.mark.asyncio
async def test_insert_seed(session: Session):
    service = CompoundService(session)

    compound = await service.insert_seed()

    assert compound.name == "P4-t-Bu"
    assert compound.formula == "C32H60N4P"
    assert properties_of(session, compound.id) == {
        "pKa": 42, "energy_eV": 0.85, "geometry": "bulky phosphazene, superbasic", "is_superbase": True}


@pytest.mark.asyncio
async def test_insert_seed_when_present_fails(session: Session):
    service = CompoundService(session)
    await service.save_compound(CompoundForm(name="P4-t-Bu", pKa="42"))

    with pytest.raises(QueryError, match="Failed to insert P4-t-Bu"):
        await service.insert_seed()

    assert len(session.exec(select(ChemicalCompound)).all()) == 1


@pytest.mark.asyncio
async def test_save_stamps_timezone_aware_times(session: Session):
    assert ChemicalCompound(name="X").created_at.tzinfo is timezone.utc

    service = CompoundService(session)
    before = datetime.now(timezone.utc)
    compound = await service.save_compound(CompoundForm(name="DBU", pKa="24.3"))

    assert compound.id is not None
    assert compound.updated_at.replace(tzinfo=timezone.utc) >= before.replace(microsecond=0)
