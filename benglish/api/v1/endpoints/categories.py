"""Word category browsing endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from benglish.api import deps
from benglish.schemas import CategoryDetail, CategoryRead, DataResponse
from benglish.services.vocabulary import VocabularyService
from benglish.utils.cache import build_cache_key, cache_backend

router = APIRouter(prefix="/categories", tags=["categories"])

CACHE_TTL_SECONDS = 3600


@router.get("", response_model=DataResponse[list[CategoryRead]])
def list_categories(db: Session = Depends(deps.get_db)) -> DataResponse[list[CategoryRead]]:
    """Return every category without its items, sorted by name."""

    cache_key = build_cache_key(view="list")
    cached = cache_backend.get("categories:list", cache_key)
    if cached is not None:
        return cached

    categories = VocabularyService(db).list_categories()
    response = DataResponse[list[CategoryRead]](
        data=[CategoryRead.model_validate(category) for category in categories]
    )
    payload = response.model_dump(mode="json")
    cache_backend.set("categories:list", cache_key, payload, ttl_seconds=CACHE_TTL_SECONDS)
    return payload


@router.get("/{category_id}", response_model=DataResponse[CategoryDetail])
def get_category(
    category_id: int, db: Session = Depends(deps.get_db)
) -> DataResponse[CategoryDetail]:
    """Retrieve a category with its word pairs."""

    cache_key = build_cache_key(category_id=category_id)
    cached = cache_backend.get("categories:item", cache_key)
    if cached is not None:
        return cached

    category = VocabularyService(db).get_category(category_id)
    detail = CategoryDetail(
        id=category.id,
        category=category.category,
        total=category.total,
        image=category.image,
        items=category.items or [],
    )
    payload = DataResponse[CategoryDetail](data=detail).model_dump(mode="json")
    cache_backend.set("categories:item", cache_key, payload, ttl_seconds=CACHE_TTL_SECONDS)
    return payload
