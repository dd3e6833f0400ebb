from fastapi import Request

from exchangerates.services.rates.cache_service import DatasetStore


def get_store(request: Request) -> DatasetStore:
    return request.app.state.store
