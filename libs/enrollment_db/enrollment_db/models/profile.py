from uuid import uuid4

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from common.ids import ProfileId
from enrollment_db.db import Base


class Profile(Base):
    """Registered user. Owned by the sign-up flow; read-only here."""

    __tablename__ = "profiles"

    id: Mapped[ProfileId] = mapped_column(Uuid(), primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True, nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
