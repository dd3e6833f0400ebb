from fastapi import APIRouter, Depends

from exchangerates.models.rates import HealthOut
from exchangerates.services.rates.cache_service import DatasetStore
from .deps import get_store

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthOut, summary="Liveness and dataset status")
async def health(store: DatasetStore = Depends(get_store)):
    dataset = store.dataset
    timeframe = dataset.timeframe() if dataset is not None else None
    return HealthOut(
        status="ok",
        dataset_loaded=timeframe is not None,
        last_day=timeframe[1] if timeframe else None,
        updated_at=store.updated_at,
    )
