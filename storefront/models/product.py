from sqlalchemy import Column, String, Boolean, DateTime, Integer, ForeignKey, Text, Float, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from storefront.core.database import Base


class ProductStatus(str, enum.Enum):
    """Product publication status"""
    ACTIVE = "active"
    INACTIVE = "inactive"
    DRAFT = "draft"


class Product(Base):
    """Catalog product"""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(280), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)
    short_description = Column(String(500), nullable=True)

    price = Column(Float, nullable=False)
    sale_price = Column(Float, nullable=True)
    sku = Column(String(100), unique=True, nullable=True)
    stock_quantity = Column(Integer, default=0, nullable=False)

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    featured_image = Column(String(500), nullable=True)
    gallery = Column(JSON, nullable=True)

    status = Column(String(20), default=ProductStatus.ACTIVE.value, nullable=False, index=True)
    is_featured = Column(Boolean, default=False, nullable=False)

    # SEO
    meta_title = Column(String(255), nullable=True)
    meta_description = Column(String(500), nullable=True)

    # Counters maintained by the services
    view_count = Column(Integer, default=0, nullable=False)
    average_rating = Column(Float, default=0, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = relationship("Category", back_populates="products", lazy="selectin")
    reviews = relationship("Review", back_populates="product", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def category_name(self):
        return self.category.name if self.category else None

    @property
    def category_slug(self):
        return self.category.slug if self.category else None

    @property
    def final_price(self) -> float:
        return self.sale_price or self.price

    @property
    def discount_percentage(self) -> int:
        if not self.sale_price or not self.price:
            return 0
        return round((self.price - self.sale_price) / self.price * 100)

    def __repr__(self):
        return f"<Product {self.slug}>"
