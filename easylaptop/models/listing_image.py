from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from easylaptop.core.database import Base


class ListingImage(Base):
    """One entry in a listing's ordered image sequence."""

    __tablename__ = "listing_images"
    __table_args__ = (UniqueConstraint("listing_id", "position", name="uq_listing_image_position"),)

    id = Column(Integer, primary_key=True)
    listing_id = Column(Integer, ForeignKey("listings.id", ondelete="CASCADE"), index=True, nullable=False)

    # zero-based; new uploads continue after the last position
    position = Column(Integer, nullable=False)
    # "/uploads/laptop-<uuid>.<ext>" for stored files, otherwise kept as given
    ref = Column(String(500), nullable=False)

    listing = relationship("Listing", back_populates="images")
