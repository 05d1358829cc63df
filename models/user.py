from models.base_model import Base, BaseModel, TimestampMixin
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

DEFAULT_ROLE = "user"


class User(TimestampMixin, BaseModel, Base):
    __tablename__ = "users"
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(100), nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=DEFAULT_ROLE)

    refresh_tokens = relationship(
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    markers = relationship(
        "Marker",
        back_populates="creator",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")

    def __repr__(self):
        return f"<User id={self.id} email={self.email}>"
