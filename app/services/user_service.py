from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.domain.mappers import user_from_storage
from app.domain.models import (
    ChangeKind,
    User,
    UserCreate,
    UserRead,
    UserStatus,
    UserUpdate,
    new_id,
    now_utc,
)
from app.infra.auth import hash_password, verify_password
from app.services.base import TenantScopedService
from app.services.errors import AuthError, ConflictError, ForbiddenError, NotFoundError

INVALID_CREDENTIALS = "Invalid username or password"
INACTIVE_ACCOUNT = "Account is inactive. Contact your barangay administrator."


def username_key(username: str) -> str:
    return username.strip().lower()


class UserService(TenantScopedService):
    kind = ChangeKind.USERS

    def _get_scoped_user(self, session: Session, barangay_id: str, user_id: str) -> User | None:
        return session.exec(
            select(User).where(User.barangay_id == barangay_id).where(User.id == user_id)
        ).first()

    def _ensure_username_available(
        self,
        session: Session,
        barangay_id: str,
        key: str,
    ) -> None:
        existing = session.exec(
            select(User).where(User.barangay_id == barangay_id).where(User.username_key == key)
        ).first()
        if existing is not None:
            raise ConflictError("username already taken")

    def get_all(self) -> list[UserRead]:
        barangay_id = self._tenant_id()
        if not barangay_id:
            return []
        with self._session() as session:
            rows = session.exec(
                select(User).where(User.barangay_id == barangay_id).order_by(User.full_name)
            ).all()
        return [user_from_storage(row) for row in rows]

    def get(self, user_id: str) -> UserRead | None:
        barangay_id = self._tenant_id()
        if not barangay_id:
            return None
        with self._session() as session:
            user = self._get_scoped_user(session, barangay_id, user_id)
        return user_from_storage(user) if user is not None else None

    def get_by_id(self, user_id: str) -> UserRead | None:
        """Unscoped lookup used to refresh a session from its token subject."""
        with self._session() as session:
            user = session.get(User, user_id)
        return user_from_storage(user) if user is not None else None

    def add(self, payload: UserCreate) -> UserRead:
        barangay_id = self._require_tenant_id()
        key = username_key(payload.username)
        with self._session() as session:
            self._ensure_username_available(session, barangay_id, key)
            user = User(
                id=payload.id or new_id(),
                barangay_id=barangay_id,
                full_name=payload.full_name,
                username=payload.username.strip(),
                username_key=key,
                role=payload.role,
                status=payload.status,
                email=payload.email,
                password_hash=hash_password(payload.password),
            )
            session.add(user)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise ConflictError("username already taken") from exc
            session.refresh(user)

        self._emit("created", barangay_id, {"user_id": user.id, "role": str(user.role)})
        return user_from_storage(user)

    def update(self, user_id: str, payload: UserUpdate) -> UserRead:
        barangay_id = self._require_tenant_id()
        self._ensure_same_tenant(barangay_id, payload.barangay_id, "user")
        changes = payload.model_dump(exclude_none=True, exclude={"barangay_id", "password"})
        with self._session() as session:
            user = self._get_scoped_user(session, barangay_id, user_id)
            if user is None:
                raise NotFoundError("user not found")
            for field, value in changes.items():
                setattr(user, field, value)
            if payload.password is not None:
                user.password_hash = hash_password(payload.password)
            session.add(user)
            session.commit()
            session.refresh(user)

        fields = sorted(changes) + (["password"] if payload.password is not None else [])
        self._emit("updated", barangay_id, {"user_id": user.id, "fields": fields})
        return user_from_storage(user)

    def delete(self, user_id: str) -> None:
        barangay_id = self._require_tenant_id()
        if user_id == self._context.actor_id:
            raise ForbiddenError("You cannot delete your own account.")
        with self._session() as session:
            user = self._get_scoped_user(session, barangay_id, user_id)
            if user is None:
                raise NotFoundError("user not found")
            session.delete(user)
            session.commit()
        self._emit("deleted", barangay_id, {"user_id": user_id})

    def login(self, identifier: str, password: str) -> UserRead:
        """Authenticate by username across all barangays.

        Usernames are only unique within a barangay, so every account whose
        name matches is tried against the password, oldest account first.
        """
        key = username_key(identifier)
        with self._session() as session:
            candidates = session.exec(
                select(User).where(User.username_key == key).order_by(User.created_at, User.id)
            ).all()
        for candidate in candidates:
            if not verify_password(password, candidate.password_hash):
                continue
            if candidate.status != UserStatus.ACTIVE:
                raise AuthError(INACTIVE_ACCOUNT)
            return user_from_storage(candidate)
        raise AuthError(INVALID_CREDENTIALS)

    def _stamp(self, user_id: str, column: str) -> None:
        with self._session() as session:
            user = session.get(User, user_id)
            if user is None:
                raise NotFoundError("user not found")
            setattr(user, column, now_utc())
            session.add(user)
            session.commit()

    def log_session_start(self, user_id: str) -> None:
        self._stamp(user_id, "last_sign_in_at")

    def log_session_end(self, user_id: str) -> None:
        self._stamp(user_id, "last_sign_out_at")
