from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from ..db.session import get_session
from ..errors import ConflictError, NotFoundError, ValidationFailed
from ..models import Area
from ..schemas import AreaCreate, AreaUpdate
from ..utils.dto import to_area_dto
from ..utils.slug import area_slug


class AreaService:
    """Delivery areas and their fee schedules. Slugs always follow the name."""

    def __init__(self, session_factory=get_session):
        self._session_factory = session_factory

    def list_areas(self, *, active_only: bool = False) -> List[Dict]:
        with self._session_factory() as session:
            q = session.query(Area)
            if active_only:
                q = q.filter(Area.is_active.is_(True))
            return [to_area_dto(r) for r in q.order_by(Area.id).all()]

    def create_area(self, data: AreaCreate) -> Dict:
        slug = self._slug_for(data.name)
        with self._session_factory() as session:
            self._ensure_slug_free(session, slug)
            row = Area(
                name=data.name,
                slug=slug,
                is_active=data.is_active,
                delivery_fee=data.delivery_fee if data.delivery_fee is not None else 0,
                service_fee=data.service_fee if data.service_fee is not None else 0,
            )
            session.add(row)
            self._flush(session)
            return to_area_dto(row)

    def update_area(self, area_id: int, data: AreaUpdate) -> Dict:
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        if not changes:
            raise ValidationFailed("No fields to update.")
        with self._session_factory() as session:
            row = session.get(Area, area_id)
            if row is None:
                raise NotFoundError("Area not found")
            if "name" in changes:
                changes["slug"] = self._slug_for(changes["name"])
                self._ensure_slug_free(session, changes["slug"], exclude_id=area_id)
            for key, value in changes.items():
                setattr(row, key, value)
            self._flush(session)
            return to_area_dto(row)

    def delete_area(self, area_id: int) -> None:
        with self._session_factory() as session:
            row = session.get(Area, area_id)
            if row is None:
                raise NotFoundError("Area not found")
            session.delete(row)
            session.flush()

    @staticmethod
    def _slug_for(name: str) -> str:
        slug = area_slug(name)
        if not slug:
            raise ValidationFailed("Area name must contain letters or digits")
        return slug

    @staticmethod
    def _ensure_slug_free(session, slug: str, exclude_id: Optional[int] = None) -> None:
        q = session.query(Area.id).filter(Area.slug == slug)
        if exclude_id is not None:
            q = q.filter(Area.id != exclude_id)
        if q.first():
            raise ConflictError("Slug must be unique.")

    @staticmethod
    def _flush(session) -> None:
        try:
            session.flush()
        except IntegrityError as exc:
            raise ConflictError("Slug must be unique.") from exc
