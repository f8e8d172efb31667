"""
Brand API Routes
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies.auth import require_admin
from app.db.database import get_db
from app.domain.services.catalog_service import CatalogService

router = APIRouter()


class BrandPayload(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    logo_url: Optional[str] = None


class BrandResponse(BaseModel):
    id: uuid.UUID
    name: str
    logo_url: Optional[str]

    model_config = {"from_attributes": True}


@router.get("", response_model=List[BrandResponse], summary="List brands")
async def list_brands(db: AsyncSession = Depends(get_db)):
    return await CatalogService(db).list_brands()


@router.get(
    "/{brand_id}",
    response_model=BrandResponse,
    summary="Get a brand",
    responses={404: {"description": "Brand not found"}},
)
async def get_brand(brand_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await CatalogService(db).get_brand(brand_id)


@router.post(
    "",
    response_model=BrandResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a brand (admin)",
    dependencies=[Depends(require_admin)],
    responses={401: {"description": "Not authenticated"}, 403: {"description": "Admin only"}},
)
async def create_brand(payload: BrandPayload, db: AsyncSession = Depends(get_db)):
    return await CatalogService(db).create_brand(payload.name.strip(), payload.logo_url)


@router.put(
    "/{brand_id}",
    response_model=BrandResponse,
    summary="Replace a brand (admin)",
    dependencies=[Depends(require_admin)],
    responses={404: {"description": "Brand not found"}},
)
async def update_brand(brand_id: uuid.UUID, payload: BrandPayload, db: AsyncSession = Depends(get_db)):
    return await CatalogService(db).update_brand(brand_id, payload.name.strip(), payload.logo_url)


@router.delete(
    "/{brand_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a brand (admin)",
    dependencies=[Depends(require_admin)],
    responses={404: {"description": "Brand not found"}},
)
async def delete_brand(brand_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    await CatalogService(db).delete_brand(brand_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
