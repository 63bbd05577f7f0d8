import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from api.perimeter_routes import PerimeterRead
from core.deps import require_manager_role
from db.session import get_session
from services.perimeter_config import PerimeterUpdate, update_perimeter

logger = logging.getLogger(__name__)

# --- Router Definition ---
router = APIRouter()


# Endpoint: Update the Work Zone
# Applies to the next position evaluation; recorded events are untouched
@router.put("", response_model=PerimeterRead)
def put_perimeter(
    perimeter_update: PerimeterUpdate,  # Expects request body matching PerimeterUpdate model
    session: Annotated[Session, Depends(get_session)],  # DB session dependency
    manager: Annotated[dict, Depends(require_manager_role)],  # Manager auth dependency
):
    try:
        zone = update_perimeter(session, perimeter_update, manager["id"])
    except Exception as e:
        # Rollback if update fails
        session.rollback()
        logger.error(f"Error updating work zone: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not update work zone.",
        )

    return PerimeterRead.from_zone(zone)
