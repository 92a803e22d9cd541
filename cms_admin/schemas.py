from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ContentFieldRecord(BaseModel):
    """Schema for a stored content field."""

    id: str
    content_type_id: str
    field_key: str
    label: str
    type: str
    required: bool
    help_text: str
    order_index: int
    config: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ContentTypeRecord(BaseModel):
    """Schema for a stored content type, as returned by the import."""

    id: str
    slug: str
    type: str
    label_singular: str
    label_plural: str
    description: str
    icon: Optional[str] = None
    is_system: bool
    name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ContentTypeDetail(ContentTypeRecord):
    """Content type with its fields ordered by order_index."""

    fields: List[ContentFieldRecord] = []


class PaginatedContentTypes(BaseModel):
    items: List[ContentTypeRecord]
    total: int
    limit: int
    offset: int


class ImportDryRunResult(BaseModel):
    """What an import would do, without writing anything."""

    ok: bool = True
    dry_run: bool = Field(default=True, alias="dryRun")
    slug: str
    will_create_or_update: bool = Field(default=True, alias="willCreateOrUpdate")
    fields_provided: int = Field(alias="fieldsProvided")
    fields_normalized: int = Field(alias="fieldsNormalized")

    model_config = ConfigDict(populate_by_name=True)


class ImportResult(BaseModel):
    """Outcome of a committed import."""

    ok: bool = True
    content_type: ContentTypeRecord = Field(alias="contentType")
    fields_imported: int = Field(alias="fieldsImported")
    replaced_existing: bool = Field(alias="replacedExisting")

    model_config = ConfigDict(populate_by_name=True)
