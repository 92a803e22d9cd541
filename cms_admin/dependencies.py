from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from cms_admin.db.database import get_db
from cms_admin.db.repositories.content_type import ContentTypeRepository


def get_content_type_repository(
    db: Annotated[Session, Depends(get_db)]
) -> ContentTypeRepository:
    """
    Dependency-injected ContentTypeRepository bound to the request's session.
    """
    return ContentTypeRepository(db)
