from fastapi import APIRouter, Depends

from checkresume.core.security import current_user_id
from checkresume.schemas.resume import Insight
from checkresume.services import analytics as analytics_service

router = APIRouter()


@router.get("/analytics/dashboard")
def dashboard(user_id: str = Depends(current_user_id)):
    return analytics_service.get_user_dashboard(user_id)


@router.get("/analytics/insights", response_model=list[Insight])
def insights(user_id: str = Depends(current_user_id)):
    return analytics_service.generate_insights(user_id)
