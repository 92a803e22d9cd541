"""
Parsing and normalization of content-type import payloads.

An import payload looks like::

    {
        "contentType": {"slug": "case", "singular": "Case", "plural": "Cases"},
        "fields": [{"key": "status", "type": "select"}],
        "dryRun": false
    }

``parse_import_payload`` validates it in a fixed order (first failure wins)
and returns an ``ImportRequest`` ready to be written or reported as a dry run.
Nothing here touches the database.
"""

import math
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from cms_admin.constants import (
    DEFAULT_CONTENT_KIND,
    DEFAULT_FIELD_TYPE,
    MAX_IMPORT_FIELDS,
)
from cms_admin.import_exceptions import (
    InvalidPayload,
    MissingRequiredAttributes,
    NoValidFields,
    TooManyFields,
)


class ContentTypeAttributes(BaseModel):
    """
    Resolved content-type attributes.

    Used whole when a content type is created, and as a partial update when
    one is replaced: attributes left as None are absent and keep their stored
    value.

    ``is_system`` only accepts a JSON boolean when updating, while a new
    content type takes the truthiness of whatever was sent
    (``is_system_on_insert``).
    """

    type: Optional[str] = None
    label_singular: Optional[str] = None
    label_plural: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    is_system: Optional[bool] = None
    name: Optional[str] = None
    is_system_on_insert: bool = Field(default=False, exclude=True)

    def as_insert(self) -> Dict[str, Any]:
        """Column values for a new content type."""
        values = self.model_dump()
        values["is_system"] = self.is_system_on_insert
        return values

    def as_update(self) -> Dict[str, Any]:
        """Only the attributes that are present."""
        return self.model_dump(exclude_none=True)


class NormalizedField(BaseModel):
    field_key: str
    label: str
    type: str = DEFAULT_FIELD_TYPE
    required: bool = False
    help_text: str = ""
    # A non-integral number is kept so the write rejects it
    order_index: Union[int, float]
    config: Dict[str, Any] = Field(default_factory=dict)


class ImportRequest(BaseModel):
    """A validated import. Never persisted."""

    slug: str
    attributes: ContentTypeAttributes
    fields: List[NormalizedField]
    fields_provided: int
    dry_run: bool = False

    @property
    def fields_normalized(self) -> int:
        return len(self.fields)


def _first_present(source: Dict[str, Any], *keys: str) -> Any:
    """First truthy value among ``keys`` in ``source``, or None."""
    for key in keys:
        value = source.get(key)
        if value:
            return value
    return None


def _text(value: Any, default: str = "") -> str:
    if not value:
        return default
    return str(value).strip()


def _order_index(value: Any, position: int) -> Union[int, float]:
    # bool is an int subclass but never an explicit ordering index
    if isinstance(value, bool):
        return position
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value) if value.is_integer() else value
    return position


def normalize_field(entry: Any, position: int) -> Optional[NormalizedField]:
    """
    Normalize one raw field entry.

    Returns None when the entry has no usable key; such entries are dropped
    without raising.
    """
    if not isinstance(entry, dict):
        return None

    field_key = _text(_first_present(entry, "key", "field_key"))
    if not field_key:
        return None

    return NormalizedField(
        field_key=field_key,
        label=_text(entry.get("label"), field_key),
        type=_text(entry.get("type"), DEFAULT_FIELD_TYPE) or DEFAULT_FIELD_TYPE,
        required=bool(entry.get("required")),
        help_text=_text(entry.get("help_text")),
        order_index=_order_index(entry.get("order_index"), position),
        config={
            "optionsSource": entry.get("optionsSource"),
            "options": entry.get("options"),
            "relation": entry.get("relation"),
        },
    )


def resolve_attributes(
    content_type: Dict[str, Any], label_singular: str, label_plural: str
) -> ContentTypeAttributes:
    kind = content_type.get("type")
    description = content_type.get("description")
    is_system = content_type.get("is_system")
    icon = content_type.get("icon")
    # type and description are stored as sent, untrimmed
    return ContentTypeAttributes(
        type=str(kind) if kind else DEFAULT_CONTENT_KIND,
        label_singular=label_singular,
        label_plural=label_plural,
        description=str(description) if description else "",
        icon=str(icon) if icon is not None else None,
        is_system=is_system if isinstance(is_system, bool) else False,
        name=label_plural,
        is_system_on_insert=bool(is_system),
    )


def parse_import_payload(payload: Any) -> ImportRequest:
    """
    Validate and normalize a raw import payload.

    Raises:
        InvalidPayload: contentType is not an object or fields is not a list
        TooManyFields: more than MAX_IMPORT_FIELDS entries
        MissingRequiredAttributes: slug, singular or plural label is empty
        NoValidFields: no field entry survived normalization
    """
    if not isinstance(payload, dict):
        raise InvalidPayload()

    content_type = payload.get("contentType")
    fields = payload.get("fields")
    if not isinstance(content_type, dict) or not isinstance(fields, list):
        raise InvalidPayload()

    if len(fields) > MAX_IMPORT_FIELDS:
        raise TooManyFields(len(fields), MAX_IMPORT_FIELDS)

    slug = _text(_first_present(content_type, "slug", "key"))
    label_singular = _text(_first_present(content_type, "singular", "label_singular"))
    label_plural = _text(_first_present(content_type, "plural", "label_plural"))
    if not slug or not label_singular or not label_plural:
        raise MissingRequiredAttributes()

    normalized = []
    for position, entry in enumerate(fields):
        field = normalize_field(entry, position)
        if field is not None:
            normalized.append(field)

    if not normalized:
        raise NoValidFields()

    return ImportRequest(
        slug=slug,
        attributes=resolve_attributes(content_type, label_singular, label_plural),
        fields=normalized,
        fields_provided=len(fields),
        dry_run=bool(payload.get("dryRun")),
    )
