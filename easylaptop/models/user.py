from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from easylaptop.core.database import Base, utcnow

USER_TYPES = ("seller", "customer", "both")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    # always stored trimmed and lowercased
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    phone = Column(String(50), nullable=True)
    # affiliation used by the "myCollege" listing filter
    college = Column(String(255), nullable=True)

    user_type = Column(String(20), nullable=False, default="both")
    role = Column(String(20), nullable=False, default="student")

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    listings = relationship(
        "Listing",
        back_populates="owner",
        cascade="all, delete-orphan",
    )
