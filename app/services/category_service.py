import logging
import re
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError
from app.models.category import Category
from app.schemas.category import CategoryCreate

logger = logging.getLogger(__name__)

ROOT = "root"


def _slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def get_category(db: Session, category_id: str) -> Optional[Category]:
    return db.query(Category).filter(Category.id == category_id).first()


def list_categories(db: Session, parent_id: Optional[str] = None) -> List[Category]:
    """
    parent_id=None lists everything, parent_id="root" lists top-level
    categories, any other value lists that category's children.
    """
    query = db.query(Category)
    if parent_id == ROOT:
        query = query.filter(Category.parent_id.is_(None))
    elif parent_id:
        query = query.filter(Category.parent_id == parent_id)
    return query.order_by(Category.name.asc()).all()


def create_category(db: Session, data: CategoryCreate) -> Category:
    if db.query(Category).filter(Category.name == data.name).first():
        raise ConflictError("Category with this name already exists")

    if data.parent_id and not get_category(db, data.parent_id):
        raise NotFoundError("Parent category not found")

    category = Category(
        name=data.name,
        slug=_slugify(data.name),
        description=data.description,
        icon=data.icon,
        parent_id=data.parent_id or None,
    )
    db.add(category)
    db.commit()
    db.refresh(category)
    logger.info("category %s (%s) created", category.id, category.name)
    return category


def rename_category(db: Session, category_id: str, new_name: str) -> Category:
    """Renames in the identity store only; product snapshots keep the old name."""
    category = get_category(db, category_id)
    if not category:
        raise NotFoundError("Category not found")
    clash = (
        db.query(Category)
        .filter(Category.name == new_name, Category.id != category_id)
        .first()
    )
    if clash:
        raise ConflictError("Category with this name already exists")
    category.name = new_name
    category.slug = _slugify(new_name)
    db.commit()
    db.refresh(category)
    return category
