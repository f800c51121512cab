from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from ..db.session import get_session
from ..errors import ConflictError, NotFoundError, ValidationFailed
from ..models import Area, Category, Product
from ..schemas import CategoryCreate, CategoryUpdate, ProductCreate, ProductUpdate, dump_customization_groups
from ..utils.dto import to_category_dto, to_product_dto
from ..utils.slug import generate_slug, unique_suffix


def _clean_slug(slug: Optional[str], name: str) -> str:
    """URL-safe slug: the supplied one normalized, else one derived from ``name``."""
    source = slug if slug is not None and slug.strip() else name
    cleaned = generate_slug(source)
    if not cleaned:
        raise ValidationFailed("Slug must not be empty")
    return cleaned


class CatalogService:
    """Categories and products.

    Responsibilities:
    - CRUD for categories; duplicate slugs are rejected (409)
    - CRUD for products; a colliding product slug gets a unique suffix instead
    - Product listing filtered by category, area or featured flag
    """

    def __init__(self, session_factory=get_session):
        self._session_factory = session_factory

    # --- categories ------------------------------------------------------

    def list_categories(self) -> List[Dict]:
        with self._session_factory() as session:
            rows = session.query(Category).order_by(Category.id).all()
            return [to_category_dto(r) for r in rows]

    def get_category(self, category_id: int) -> Dict:
        with self._session_factory() as session:
            row = session.get(Category, category_id)
            if row is None:
                raise NotFoundError("Category not found")
            return to_category_dto(row)

    def create_category(self, data: CategoryCreate) -> Dict:
        slug = _clean_slug(data.slug, data.name)
        with self._session_factory() as session:
            if session.query(Category).filter(Category.slug == slug).first():
                raise ConflictError("Slug must be unique.")
            if data.parent_id is not None and session.get(Category, data.parent_id) is None:
                raise ValidationFailed("Parent category not found")
            row = Category(name=data.name, slug=slug, is_active=data.is_active, parent_id=data.parent_id)
            session.add(row)
            self._flush(session, "Slug must be unique.")
            return to_category_dto(row)

    def update_category(self, category_id: int, data: CategoryUpdate) -> Dict:
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationFailed("No fields to update.")
        if changes.get("name") and not (changes.get("slug") or "").strip():
            changes["slug"] = _clean_slug(None, changes["name"])
        elif "slug" in changes:
            if not (changes["slug"] or "").strip():
                raise ValidationFailed("Slug must not be empty")
            changes["slug"] = _clean_slug(changes["slug"], "")
        with self._session_factory() as session:
            row = session.get(Category, category_id)
            if row is None:
                raise NotFoundError("Category not found")
            slug = changes.get("slug")
            if slug and session.query(Category).filter(Category.slug == slug, Category.id != category_id).first():
                raise ConflictError("Slug must be unique.")
            parent_id = changes.get("parent_id")
            if parent_id is not None:
                if parent_id == category_id:
                    raise ValidationFailed("A category cannot be its own parent")
                if session.get(Category, parent_id) is None:
                    raise ValidationFailed("Parent category not found")
            for key, value in changes.items():
                setattr(row, key, value)
            self._flush(session, "Slug must be unique.")
            return to_category_dto(row)

    def delete_category(self, category_id: int) -> None:
        with self._session_factory() as session:
            row = session.get(Category, category_id)
            if row is None:
                raise NotFoundError("Category not found")
            in_use = session.query(func.count(Product.id)).filter(Product.category_id == category_id).scalar()
            if in_use:
                raise ConflictError("Category still has products.")
            session.query(Category).filter(Category.parent_id == category_id).update({Category.parent_id: None})
            session.delete(row)
            session.flush()

    # --- products --------------------------------------------------------

    def list_products(
        self,
        *,
        category: Optional[int] = None,
        area_id: Optional[int] = None,
        featured: Optional[bool] = None,
        active_only: bool = False,
    ) -> List[Dict]:
        with self._session_factory() as session:
            q = session.query(Product)
            if category is not None:
                q = q.filter(Product.category_id == category)
            if area_id is not None:
                q = q.filter(Product.area_id == area_id)
            if featured is not None:
                q = q.filter(Product.is_featured.is_(featured))
            if active_only:
                q = q.filter(Product.is_active.is_(True))
            rows = q.order_by(Product.created_at.desc(), Product.id.desc()).all()
            return [to_product_dto(r) for r in rows]

    def get_product(self, product_id: int) -> Dict:
        with self._session_factory() as session:
            row = session.get(Product, product_id)
            if row is None:
                raise NotFoundError("Product not found")
            return to_product_dto(row)

    def create_product(self, data: ProductCreate) -> Dict:
        values = data.model_dump(exclude={"customization_options"})
        values["customization_options"] = dump_customization_groups(data.customization_options)
        if values.get("min_order_qty") is None:
            values["min_order_qty"] = 1
        with self._session_factory() as session:
            self._check_references(session, values)
            values["slug"] = self._available_product_slug(session, values.get("slug") or "", values["name"])
            row = Product(**values)
            session.add(row)
            self._flush(session, "Slug must be unique.")
            return to_product_dto(row)

    def update_product(self, product_id: int, data: ProductUpdate) -> Dict:
        changes = data.model_dump(exclude_unset=True, exclude={"customization_options"})
        if data.customization_options is not None:
            changes["customization_options"] = dump_customization_groups(data.customization_options)
        if "price" in changes and changes["price"] is None:
            del changes["price"]
        if "min_order_qty" in changes and changes["min_order_qty"] is None:
            del changes["min_order_qty"]
        if not changes:
            raise ValidationFailed("No fields to update.")
        with self._session_factory() as session:
            row = session.get(Product, product_id)
            if row is None:
                raise NotFoundError("Product not found")
            self._check_references(session, changes)
            if changes.get("slug"):
                changes["slug"] = self._available_product_slug(
                    session, changes["slug"], changes.get("name") or row.name, exclude_id=product_id
                )
            elif "slug" in changes:
                del changes["slug"]
            for key, value in changes.items():
                setattr(row, key, value)
            self._flush(session, "Slug must be unique.")
            return to_product_dto(row)

    def delete_product(self, product_id: int) -> None:
        # order items keep their own snapshot, so history survives the delete
        with self._session_factory() as session:
            row = session.get(Product, product_id)
            if row is None:
                raise NotFoundError("Product not found")
            session.delete(row)
            session.flush()

    # --- helpers ---------------------------------------------------------

    @staticmethod
    def _check_references(session, values: Dict) -> None:
        if values.get("category_id") is not None and session.get(Category, values["category_id"]) is None:
            raise ValidationFailed("Category not found")
        if values.get("area_id") is not None and session.get(Area, values["area_id"]) is None:
            raise ValidationFailed("Area not found")

    @staticmethod
    def _available_product_slug(session, slug: str, name: str, exclude_id: Optional[int] = None) -> str:
        slug = _clean_slug(slug, name)
        q = session.query(Product.id).filter(Product.slug == slug)
        if exclude_id is not None:
            q = q.filter(Product.id != exclude_id)
        if q.first():
            return unique_suffix(slug)
        return slug

    @staticmethod
    def _flush(session, conflict_message: str) -> None:
        try:
            session.flush()
        except IntegrityError as exc:
            raise ConflictError(conflict_message) from exc
