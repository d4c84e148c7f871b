"""
Reference Data Router

Constants behind the planetary hour sequence: the Chaldean order and
the ruler of each weekday.
"""

from fastapi import APIRouter

from api.models.responses import DayRulerInfo, ReferenceResponse, RulerInfo
from app.openapi.common import DEFAULT_ERROR_RESPONSES
from modules.planetary_hours import CHALDEAN_ORDER, DAY_RULERS, start_index_for_day

router = APIRouter(prefix="/api/v1/ref", tags=["reference"], responses=DEFAULT_ERROR_RESPONSES)


@router.get(
    "/chaldean-order",
    response_model=ReferenceResponse,
    summary="Chaldean Order",
    operation_id="ref_chaldean_order",
)
async def get_chaldean_order() -> ReferenceResponse:
    """
    The seven classical planets from slowest to fastest apparent motion.

    Planetary hours walk this sequence cyclically, one step per hour.
    """
    rulers = [RulerInfo(index=i, name=r.value) for i, r in enumerate(CHALDEAN_ORDER)]
    return ReferenceResponse(data=rulers, count=len(rulers))


@router.get(
    "/day-rulers",
    response_model=ReferenceResponse,
    summary="Day Rulers",
    operation_id="ref_day_rulers",
)
async def get_day_rulers() -> ReferenceResponse:
    """Weekday rulers and the Chaldean index each day's first hour starts from."""
    days = [
        DayRulerInfo(day=day.value, ruler=ruler.value, start_index=start_index_for_day(day))
        for day, ruler in DAY_RULERS.items()
    ]
    return ReferenceResponse(data=days, count=len(days))
