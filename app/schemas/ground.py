from pydantic import BaseModel
from typing import Dict, List


class GroundOut(BaseModel):
    id: int
    name: str
    pricing: Dict[str, float] = {}
    related_grounds: List[str] = []

    model_config = {
        "from_attributes": True
    }


class SlotOut(BaseModel):
    startHour: int
    startTime: str
    endTime: str
    price: float
    isBooked: bool


class AvailabilityOut(BaseModel):
    groundId: int
    groundName: str
    date: str
    slots: List[SlotOut]
