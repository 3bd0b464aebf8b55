from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.dependencies import get_db
from app.core.exceptions import NotFoundError, ValidationError
from app.core.redis import cache_availability, get_cached_availability
from app.models.ground import Ground
from app.schemas.ground import AvailabilityOut, GroundOut
from app.utils.slots import day_availability, related_ground_names

router = APIRouter(prefix="/api/grounds", tags=["Grounds"])


# =====================================================================
# LIST GROUNDS
# =====================================================================
@router.get("/", response_model=list[GroundOut])
def list_grounds(db: Session = Depends(get_db)):
    grounds = db.query(Ground).order_by(Ground.id).all()

    return [
        GroundOut(
            id=g.id,
            name=g.name,
            pricing=g.pricing or {},
            related_grounds=related_ground_names(g.name),
        )
        for g in grounds
    ]


# =====================================================================
# HOURLY AVAILABILITY
# =====================================================================
@router.get("/{ground_id}/availability", response_model=AvailabilityOut)
def availability(ground_id: int, date: str, db: Session = Depends(get_db)):
    try:
        day = datetime.strptime(date, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Invalid date format. Use YYYY-MM-DD")

    ground = db.query(Ground).filter(Ground.id == ground_id).first()
    if not ground:
        raise NotFoundError("Ground not found")

    cached = get_cached_availability(ground.id, day)
    if cached:
        return cached

    result = {
        "groundId": ground.id,
        "groundName": ground.name,
        "date": day.isoformat(),
        "slots": day_availability(db, ground, day),
    }
    cache_availability(ground.id, day, result)

    return result
