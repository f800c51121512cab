from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from ..db.session import get_session
from ..errors import AuthenticationRequired, ConflictError, NotFoundError, ValidationFailed
from ..models import User
from ..schemas import RegisterRequest, UserCreate, UserUpdate
from ..utils.dto import to_user_dto
from .logging import log_event


class UserService:
    """Accounts and credential checks. Passwords are stored as salted hashes."""

    def __init__(self, session_factory=get_session):
        self._session_factory = session_factory

    def authenticate(self, username: str, password: str) -> Dict:
        with self._session_factory() as session:
            user = session.query(User).filter(User.username == username).first()
            if user is None or not user.check_password(password):
                log_event("warning", "auth.login_failed", username=username)
                raise AuthenticationRequired("Invalid credentials")
            return to_user_dto(user)

    def register(self, data: RegisterRequest) -> Dict:
        user = self._create(data, role="customer")
        log_event("info", "user.registered", user_id=user["id"])
        return user

    def create_user(self, data: UserCreate) -> Dict:
        return self._create(data, role=data.role)

    def get_user(self, user_id: Optional[int]) -> Optional[Dict]:
        if not user_id:
            return None
        with self._session_factory() as session:
            user = session.get(User, user_id)
            return to_user_dto(user) if user else None

    def list_users(self) -> List[Dict]:
        with self._session_factory() as session:
            return [to_user_dto(u) for u in session.query(User).order_by(User.id).all()]

    def update_user(self, user_id: int, data: UserUpdate) -> Dict:
        changes = data.model_dump(exclude_unset=True)
        password = changes.pop("password", None)
        if changes.get("role") is None:
            changes.pop("role", None)
        if changes.get("username") is None:
            changes.pop("username", None)
        if not changes and not password:
            raise ValidationFailed("No fields to update.")
        with self._session_factory() as session:
            user = session.get(User, user_id)
            if user is None:
                raise NotFoundError("User not found")
            if "username" in changes and self._username_taken(session, changes["username"], exclude_id=user_id):
                raise ConflictError("Username already exists")
            for key, value in changes.items():
                setattr(user, key, value)
            if password:
                user.set_password(password)
            self._flush(session)
            return to_user_dto(user)

    def delete_user(self, user_id: int) -> None:
        with self._session_factory() as session:
            user = session.get(User, user_id)
            if user is None:
                raise NotFoundError("User not found")
            session.delete(user)
            session.flush()

    def _create(self, data: RegisterRequest, *, role: str) -> Dict:
        with self._session_factory() as session:
            if self._username_taken(session, data.username):
                raise ConflictError("Username already exists")
            user = User(
                username=data.username,
                role=role,
                name=data.name,
                email=data.email,
                phone=data.phone,
            )
            user.set_password(data.password)
            session.add(user)
            self._flush(session)
            return to_user_dto(user)

    @staticmethod
    def _username_taken(session, username: str, exclude_id: Optional[int] = None) -> bool:
        q = session.query(User.id).filter(User.username == username)
        if exclude_id is not None:
            q = q.filter(User.id != exclude_id)
        return q.first() is not None

    @staticmethod
    def _flush(session) -> None:
        try:
            session.flush()
        except IntegrityError as exc:
            raise ConflictError("Username already exists") from exc
