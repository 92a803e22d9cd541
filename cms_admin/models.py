"""
SQLAlchemy models for the content schema.

- ContentType: a user-defined kind of content item, keyed by a unique slug
- ContentField: one typed attribute of a content type, owned by it
"""

import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in unit tests)
JSONConfig = JSONB().with_variant(JSON(), "sqlite")


class ContentType(Base):
    __tablename__ = "content_types"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    slug = Column(String(255), unique=True, nullable=False, index=True)
    type = Column(String(64), nullable=False, default="content")
    label_singular = Column(String(255), nullable=False)
    label_plural = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    icon = Column(String(255), nullable=True)
    is_system = Column(Boolean, nullable=False, default=False)
    name = Column(String(255), nullable=True)  # display name, mirrors label_plural
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    fields = relationship(
        "ContentField",
        back_populates="content_type",
        cascade="all, delete-orphan",
        order_by="ContentField.order_index",
    )

    def __repr__(self):
        return f"<ContentType(slug={self.slug}, id={self.id})>"


class ContentField(Base):
    __tablename__ = "content_fields"
    __table_args__ = (
        UniqueConstraint(
            "content_type_id", "field_key", name="uq_content_fields_type_key"
        ),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    content_type_id = Column(
        String,
        ForeignKey("content_types.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    field_key = Column(String(255), nullable=False)
    label = Column(String(255), nullable=False)
    type = Column(String(64), nullable=False, default="text")
    required = Column(Boolean, nullable=False, default=False)
    help_text = Column(Text, nullable=False, default="")
    order_index = Column(Integer, nullable=False, default=0)
    config = Column(JSONConfig, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    content_type = relationship("ContentType", back_populates="fields")

    def __repr__(self):
        return f"<ContentField(field_key={self.field_key}, content_type_id={self.content_type_id})>"
