"""Repository for managing ContentType and ContentField persistence."""

from datetime import UTC, datetime
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from cms_admin.content_import import ImportRequest
from cms_admin.import_exceptions import ImportFailed
from cms_admin.models import ContentField, ContentType
from cms_admin.structlog_config import get_logger

logger = get_logger(__name__)


class ContentTypeRepository:
    """Handles database operations for content types and their fields."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_slug(self, slug: str, with_fields: bool = False) -> Optional[ContentType]:
        """Get a content type by slug"""
        query = self.db.query(ContentType).filter(ContentType.slug == slug)
        if with_fields:
            query = query.options(selectinload(ContentType.fields))
        return query.first()

    def list_all(self, limit: int = 100, offset: int = 0) -> Tuple[List[ContentType], int]:
        """
        List content types ordered by slug.

        Returns:
            Tuple of (content types list, total count)
        """
        query = self.db.query(ContentType)
        total = query.count()
        content_types = (
            query.order_by(ContentType.slug).offset(offset).limit(limit).all()
        )
        return content_types, total

    def delete(self, slug: str) -> bool:
        """Delete a content type and all of its fields"""
        content_type = self.get_by_slug(slug)
        if content_type is None:
            return False
        self.db.delete(content_type)
        self.db.commit()
        return True

    def import_content_type(
        self, import_request: ImportRequest
    ) -> Tuple[ContentType, int, bool]:
        """
        Create a content type, or update it and replace its whole field set.

        Everything happens in the session's transaction: either the content type
        and all fields are committed, or nothing is.

        Args:
            import_request: A validated import

        Returns:
            Tuple of (content type, fields imported, replaced existing)

        Raises:
            ImportFailed: Any error during the write, after rollback
        """
        slug = import_request.slug
        attributes = import_request.attributes

        try:
            content_type = (
                self.db.query(ContentType).filter(ContentType.slug == slug).first()
            )
            replaced_existing = content_type is not None

            if replaced_existing:
                for attr, value in attributes.as_update().items():
                    setattr(content_type, attr, value)
                content_type.updated_at = datetime.now(UTC)

                # Full replacement: the old field set goes before the new one
                # is inserted, so reused keys never collide
                deleted = (
                    self.db.query(ContentField)
                    .filter(ContentField.content_type_id == content_type.id)
                    .delete(synchronize_session=False)
                )
                self.db.expire(content_type, ["fields"])
                logger.debug(
                    "Existing fields removed",
                    operation="content_type_import",
                    slug=slug,
                    fields_deleted=deleted,
                )
            else:
                content_type = ContentType(slug=slug, **attributes.as_insert())
                self.db.add(content_type)

            # Assigns the content type id for new rows
            self.db.flush()

            for field in import_request.fields:
                if not float(field.order_index).is_integer():
                    raise ValueError(
                        f"order_index {field.order_index} of field "
                        f"'{field.field_key}' is not an integer"
                    )
                self.db.add(
                    ContentField(
                        content_type_id=content_type.id,
                        field_key=field.field_key,
                        label=field.label,
                        type=field.type,
                        required=field.required,
                        help_text=field.help_text,
                        order_index=field.order_index,
                        config=field.config,
                    )
                )
            self.db.flush()

            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(
                "Content type import failed",
                operation="content_type_import",
                slug=slug,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise ImportFailed(str(e)) from e

        self.db.refresh(content_type)
        fields_imported = len(import_request.fields)
        logger.info(
            "Content type imported",
            operation="content_type_import",
            slug=slug,
            content_type_id=content_type.id,
            fields_imported=fields_imported,
            replaced_existing=replaced_existing,
        )
        return content_type, fields_imported, replaced_existing
