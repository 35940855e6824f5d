from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Numeric,
    DateTime,
    ForeignKey,
)
from sqlalchemy.orm import relationship

from easylaptop.core.database import Base, utcnow

CONDITIONS = ("Excellent", "Good", "Fair", "Poor")
STATUSES = ("active", "sold", "inactive")
MIN_YEAR = 2000
# largest value Numeric(10, 2) holds
MAX_PRICE = 99_999_999.99


class Listing(Base):
    __tablename__ = "listings"

    id = Column(Integer, primary_key=True, index=True)
    # set once at creation; never reassigned
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)

    price = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)

    # laptop specs
    brand = Column(String(255), nullable=False)
    model = Column(String(255), nullable=True)
    processor = Column(String(255), nullable=True)
    ram = Column(String(50), nullable=True)
    storage = Column(String(100), nullable=True)
    screen_size = Column(String(50), nullable=True)
    condition = Column(String(20), nullable=False, default="Good")
    year = Column(Integer, nullable=True)

    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)

    status = Column(String(20), nullable=False, default="active", index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    owner = relationship("User", back_populates="listings")

    images = relationship(
        "ListingImage",
        back_populates="listing",
        cascade="all, delete-orphan",
        order_by="ListingImage.position",
    )

    @property
    def image_refs(self) -> list:
        return [image.ref for image in self.images]
