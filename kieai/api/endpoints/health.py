from fastapi import APIRouter, Depends

from kieai.api.dependencies import get_sdk
from kieai.api.schemas import HealthResponse
from kieai.core.sdk import KieAI

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(sdk: KieAI = Depends(get_sdk)) -> HealthResponse:
    return HealthResponse(status="healthy", plugins=sdk.registered_plugins())
