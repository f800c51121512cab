from datetime import datetime
from typing import Callable, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from ..db.session import get_session
from ..errors import ConflictError, NotFoundError, ValidationFailed
from ..models import Promo
from ..schemas import PromoCreate, PromoUpdate
from ..utils.dto import to_promo_dto
from .pricing import find_applicable_promo


INVALID_PROMO_MESSAGE = "Kode promo tidak valid atau sudah tidak berlaku."


class PromoService:
    """Promo codes. Codes are unique ignoring case."""

    def __init__(self, session_factory=get_session, clock: Callable[[], datetime] = datetime.now):
        self._session_factory = session_factory
        self._clock = clock

    def list_promos(self) -> List[Dict]:
        with self._session_factory() as session:
            return [to_promo_dto(r) for r in session.query(Promo).order_by(Promo.id).all()]

    def create_promo(self, data: PromoCreate) -> Dict:
        with self._session_factory() as session:
            self._ensure_code_free(session, data.code)
            row = Promo(**data.model_dump())
            session.add(row)
            self._flush(session)
            return to_promo_dto(row)

    def update_promo(self, promo_id: int, data: PromoUpdate) -> Dict:
        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationFailed("No fields to update.")
        with self._session_factory() as session:
            row = session.get(Promo, promo_id)
            if row is None:
                raise NotFoundError("Promo not found")
            if changes.get("code"):
                changes["code"] = changes["code"].strip()
                self._ensure_code_free(session, changes["code"], exclude_id=promo_id)
            for key in ("title", "code", "discount_type", "discount_value", "is_active"):
                if key in changes and changes[key] is None:
                    del changes[key]
            for key, value in changes.items():
                setattr(row, key, value)
            if row.start_date and row.end_date and row.end_date < row.start_date:
                raise ValidationFailed("endDate must not be before startDate")
            if row.discount_type == "percent" and row.discount_value > 100:
                raise ValidationFailed("percent discount must be <= 100")
            self._flush(session)
            return to_promo_dto(row)

    def delete_promo(self, promo_id: int) -> None:
        with self._session_factory() as session:
            row = session.get(Promo, promo_id)
            if row is None:
                raise NotFoundError("Promo not found")
            session.delete(row)
            session.flush()

    def find_valid(self, session, code: Optional[str], now: Optional[datetime] = None) -> Optional[Promo]:
        """Currently-valid promo row for ``code`` within an open session."""
        wanted = (code or "").strip().lower()
        if not wanted:
            return None
        candidates = session.query(Promo).filter(func.lower(Promo.code) == wanted).all()
        return find_applicable_promo(candidates, wanted, now or self._clock())

    def validate_code(self, code: str) -> Dict:
        with self._session_factory() as session:
            promo = self.find_valid(session, code)
            if promo is None:
                raise NotFoundError(INVALID_PROMO_MESSAGE)
            return to_promo_dto(promo)

    @staticmethod
    def _ensure_code_free(session, code: str, exclude_id: Optional[int] = None) -> None:
        q = session.query(Promo.id).filter(func.lower(Promo.code) == code.strip().lower())
        if exclude_id is not None:
            q = q.filter(Promo.id != exclude_id)
        if q.first():
            raise ConflictError("Promo code must be unique.")

    @staticmethod
    def _flush(session) -> None:
        try:
            session.flush()
        except IntegrityError as exc:
            raise ConflictError("Promo code must be unique.") from exc
