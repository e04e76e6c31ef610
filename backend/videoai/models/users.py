from datetime import datetime
from uuid import UUID, uuid4
from sqlmodel import SQLModel, Field
from videoai.core.formatting import utc_now

class User(SQLModel, table=True):
    __tablename__ = "users"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True)
    name: str
    password_hash: str  # pbkdf2 "salt$digest"
    created_at: datetime = Field(default_factory=utc_now)

    def to_public(self) -> dict:
        return {"id": str(self.id), "name": self.name, "email": self.email}


class AuthToken(SQLModel, table=True):
    __tablename__ = "auth_tokens"
    token: str = Field(primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    expires_at: datetime
    created_at: datetime = Field(default_factory=utc_now)
