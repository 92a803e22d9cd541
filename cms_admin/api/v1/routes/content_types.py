"""
Content type routes for the CMS admin backend.

This module provides API endpoints for:
- Listing content types and reading one with its fields
- Importing a content type with its fields (create or full replace)
- Deleting a content type
"""

from typing import Union

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from slowapi import Limiter
from slowapi.util import get_remote_address

from cms_admin.auth_utils import Principal, get_current_admin, get_current_principal
from cms_admin.config import get_settings
from cms_admin.content_import import parse_import_payload
from cms_admin.db.repositories.content_type import ContentTypeRepository
from cms_admin.dependencies import get_content_type_repository
from cms_admin.import_exceptions import ContentTypeImportError
from cms_admin.schemas import (
    ContentTypeDetail,
    ContentTypeRecord,
    ImportDryRunResult,
    ImportResult,
    PaginatedContentTypes,
)
from cms_admin.structlog_config import get_logger

logger = get_logger(__name__)

limiter = Limiter(key_func=get_remote_address)

router = APIRouter()


def import_rate_limit() -> str:
    return get_settings().IMPORT_RATE_LIMIT


@router.get("", response_model=PaginatedContentTypes)
async def list_content_types(
    limit: int = 100,
    offset: int = 0,
    repository: ContentTypeRepository = Depends(get_content_type_repository),
    _: Principal = Depends(get_current_principal),
):
    """List content types ordered by slug"""
    if limit < 1 or limit > 1000:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="limit must be between 1 and 1000",
        )
    if offset < 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="offset must not be negative",
        )

    content_types, total = repository.list_all(limit=limit, offset=offset)
    return PaginatedContentTypes(
        items=[ContentTypeRecord.model_validate(ct) for ct in content_types],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.post("/import", response_model=Union[ImportResult, ImportDryRunResult])
@limiter.limit(import_rate_limit)
async def import_content_type(
    request: Request,
    repository: ContentTypeRepository = Depends(get_content_type_repository),
    principal: Principal = Depends(get_current_admin),
):
    """
    Import a content type and its fields.

    Body: ``{"contentType": {...}, "fields": [...], "dryRun": false}``

    - If the slug does not exist: creates the content type and inserts its fields
    - If the slug exists: updates the content type and replaces all of its fields
    - With ``dryRun: true``: validates and reports, without touching the database
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = None

    try:
        import_request = parse_import_payload(payload)
    except ContentTypeImportError as e:
        logger.info(
            "Content type import rejected",
            operation="content_type_import",
            subject=principal.subject,
            error_type=type(e).__name__,
            error_message=e.message,
        )
        raise

    if import_request.dry_run:
        logger.info(
            "Content type import dry run",
            operation="content_type_import",
            subject=principal.subject,
            slug=import_request.slug,
            fields_provided=import_request.fields_provided,
            fields_normalized=import_request.fields_normalized,
        )
        return ImportDryRunResult(
            slug=import_request.slug,
            fields_provided=import_request.fields_provided,
            fields_normalized=import_request.fields_normalized,
        )

    content_type, fields_imported, replaced_existing = repository.import_content_type(
        import_request
    )
    return ImportResult(
        content_type=ContentTypeRecord.model_validate(content_type),
        fields_imported=fields_imported,
        replaced_existing=replaced_existing,
    )


@router.get("/{slug}", response_model=ContentTypeDetail)
async def get_content_type(
    slug: str,
    repository: ContentTypeRepository = Depends(get_content_type_repository),
    _: Principal = Depends(get_current_principal),
):
    """Get a content type with its fields"""
    content_type = repository.get_by_slug(slug, with_fields=True)
    if content_type is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Content type not found"
        )
    return ContentTypeDetail.model_validate(content_type)


@router.delete("/{slug}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_content_type(
    slug: str,
    repository: ContentTypeRepository = Depends(get_content_type_repository),
    principal: Principal = Depends(get_current_admin),
):
    """Delete a content type and all of its fields"""
    if not repository.delete(slug):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Content type not found"
        )
    logger.info(
        "Content type deleted by admin",
        operation="content_type_delete",
        subject=principal.subject,
        slug=slug,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
