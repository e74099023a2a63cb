# backend/tuitiontime/routes/v1/catalog.py
"""
Catalog routes - API v1

Subjects, onboarding option categories and the subject mappings that drive
the signup forms. Reads are public; writes are admin only.

Endpoints:
    GET /subjects, POST /subjects, PATCH /subjects/{id}, DELETE /subjects/{id}
    GET /option-categories, POST /option-categories,
        PATCH /option-categories/{id}, DELETE /option-categories/{id}
    GET /subject-mappings, POST /subject-mappings,
        PATCH /subject-mappings/{id}, DELETE /subject-mappings/{id}
    GET /meta/options - Active option categories keyed by ``key``
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ...api.dependencies import require_admin
from ...api.dependencies.services import get_catalog_service
from ...core.enums import MappingCategory, Track
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...models.user import User
from ...schemas.catalog import (
    MetaOptionsResponse,
    OptionCategoryCreate,
    OptionCategoryResponse,
    OptionCategoryUpdate,
    SubjectCreate,
    SubjectMappingCreate,
    SubjectMappingResponse,
    SubjectMappingUpdate,
    SubjectResponse,
    SubjectUpdate,
)
from ...services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["catalog-v1"])


# ============================================================================
# Subjects
# ============================================================================


@router.get("/subjects", response_model=List[SubjectResponse])
async def list_subjects(
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> List[SubjectResponse]:
    subjects = await asyncio.to_thread(catalog_service.list_subjects)
    return [SubjectResponse.model_validate(subject) for subject in subjects]


@router.post("/subjects", response_model=SubjectResponse, status_code=status.HTTP_201_CREATED)
async def create_subject(
    payload: SubjectCreate,
    _: User = Depends(require_admin),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> SubjectResponse:
    try:
        subject = await asyncio.to_thread(catalog_service.create_subject, payload)
        return SubjectResponse.model_validate(subject)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/subjects/{subject_id}", response_model=SubjectResponse)
async def update_subject(
    subject_id: str,
    payload: SubjectUpdate,
    _: User = Depends(require_admin),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> SubjectResponse:
    try:
        subject = await asyncio.to_thread(catalog_service.update_subject, subject_id, payload)
        return SubjectResponse.model_validate(subject)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/subjects/{subject_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subject(
    subject_id: str,
    _: User = Depends(require_admin),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> Response:
    try:
        await asyncio.to_thread(catalog_service.delete_subject, subject_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# Option categories
# ============================================================================


@router.get("/option-categories", response_model=List[OptionCategoryResponse])
async def list_option_categories(
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> List[OptionCategoryResponse]:
    categories = await asyncio.to_thread(catalog_service.list_option_categories)
    return [OptionCategoryResponse.model_validate(category) for category in categories]


@router.post(
    "/option-categories",
    response_model=OptionCategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_option_category(
    payload: OptionCategoryCreate,
    _: User = Depends(require_admin),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> OptionCategoryResponse:
    try:
        category = await asyncio.to_thread(catalog_service.create_option_category, payload)
        return OptionCategoryResponse.model_validate(category)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/option-categories/{category_id}", response_model=OptionCategoryResponse)
async def update_option_category(
    category_id: str,
    payload: OptionCategoryUpdate,
    _: User = Depends(require_admin),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> OptionCategoryResponse:
    try:
        category = await asyncio.to_thread(
            catalog_service.update_option_category, category_id, payload
        )
        return OptionCategoryResponse.model_validate(category)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/option-categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_option_category(
    category_id: str,
    _: User = Depends(require_admin),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> Response:
    try:
        await asyncio.to_thread(catalog_service.delete_option_category, category_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/meta/options", response_model=MetaOptionsResponse)
async def get_meta_options(
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> MetaOptionsResponse:
    options = await asyncio.to_thread(catalog_service.meta_options)
    return MetaOptionsResponse(options=options)


# ============================================================================
# Subject mappings
# ============================================================================


@router.get("/subject-mappings", response_model=List[SubjectMappingResponse])
async def list_subject_mappings(
    track: Optional[Track] = Query(None),
    category: Optional[MappingCategory] = Query(None),
    category_value: Optional[str] = Query(None),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> List[SubjectMappingResponse]:
    mappings = await asyncio.to_thread(
        catalog_service.list_subject_mappings,
        track=track.value if track else None,
        category=category.value if category else None,
        category_value=category_value,
    )
    return [SubjectMappingResponse.model_validate(mapping) for mapping in mappings]


@router.post(
    "/subject-mappings",
    response_model=SubjectMappingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_subject_mapping(
    payload: SubjectMappingCreate,
    _: User = Depends(require_admin),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> SubjectMappingResponse:
    try:
        mapping = await asyncio.to_thread(catalog_service.create_subject_mapping, payload)
        return SubjectMappingResponse.model_validate(mapping)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/subject-mappings/{mapping_id}", response_model=SubjectMappingResponse)
async def update_subject_mapping(
    mapping_id: str,
    payload: SubjectMappingUpdate,
    _: User = Depends(require_admin),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> SubjectMappingResponse:
    try:
        mapping = await asyncio.to_thread(
            catalog_service.update_subject_mapping, mapping_id, payload
        )
        return SubjectMappingResponse.model_validate(mapping)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/subject-mappings/{mapping_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subject_mapping(
    mapping_id: str,
    _: User = Depends(require_admin),
    catalog_service: CatalogService = Depends(get_catalog_service),
) -> Response:
    try:
        await asyncio.to_thread(catalog_service.delete_subject_mapping, mapping_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except DomainException as e:
        handle_domain_exception(e)
