from datetime import datetime, timezone
from sqlalchemy import Column, String, Float, Text, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.user import generate_id


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    """
    Product listed by a vendor.

    The image itself lives in the upload area; only its public path
    (e.g. ``/uploads/1700000000000-42-lamp.png``) is stored here.
    """
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
    )

    id = Column(String(32), primary_key=True, default=generate_id)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Float, nullable=False)
    image = Column(String, nullable=False, default="")
    vendor_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    # Stamped in Python so ordering has sub-second resolution on every backend
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    vendor = relationship("User", backref="products")
