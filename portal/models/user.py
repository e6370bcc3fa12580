"""User model: the credential store."""
from sqlalchemy import Column, String

from portal.db.session import Base


class User(Base):
    __tablename__ = "users"

    username = Column(String(50), primary_key=True)
    # Column keeps its historical name; it holds the bcrypt hash, never plaintext.
    password_hash = Column("password", String(60), nullable=False)
