import logging
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from devhub.api.deps import get_compound_service, get_current_session
from devhub.schemas.auth import AuthSession
from devhub.schemas.compound import CompoundForm, CompoundList, CompoundRead
from devhub.services.compound_service import CompoundService
from devhub.services.error_handler import DevHubError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=CompoundList)
async def read_compounds(
    current_session: AuthSession = Depends(get_current_session),
    service: CompoundService = Depends(get_compound_service),
) -> Any:
    """
    Retrieve every compound from the recent compounds view.
    Filtering happens on the client.
    """
    try:
        compounds = await service.list_recent()
    except DevHubError:
        raise
    except Exception as e:
        logger.error(f"Compound listing failed: {e}")
        return JSONResponse(status_code=500, content={"error": "Server error"})
    return {"compounds": compounds}


@router.post("", response_model=CompoundRead)
async def save_compound(
    form: CompoundForm,
    current_session: AuthSession = Depends(get_current_session),
    service: CompoundService = Depends(get_compound_service),
) -> Any:
    """
    Add or update a compound by name and rewrite its property rows.
    """
    try:
        return await service.save_compound(form)
    except DevHubError:
        raise
    except Exception as e:
        logger.error(f"Saving compound {form.name!r} failed: {e}")
        return JSONResponse(status_code=500, content={"error": "Server error"})


@router.post("/seed", response_model=CompoundRead, status_code=201)
async def insert_seed_compound(
    current_session: AuthSession = Depends(get_current_session),
    service: CompoundService = Depends(get_compound_service),
) -> Any:
    """
    Insert the P4-t-Bu seed compound.
    """
    try:
        return await service.insert_seed()
    except DevHubError:
        raise
    except Exception as e:
        logger.error(f"Seed insert failed: {e}")
        return JSONResponse(status_code=500, content={"error": "Server error"})
