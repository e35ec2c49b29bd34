import logging
import math
from typing import List, Optional
from fastapi import UploadFile
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import SQLAlchemyError
from app.core.errors import AuthzError, NotFoundError, ServerError, ValidationError
from app.core.permissions import (
    Principal,
    can_create_products,
    can_manage_product,
    can_view_vendor_products,
)
from app.models.product import Product
from app.storage.local_storage import storage

logger = logging.getLogger(__name__)

PRODUCT_NOT_FOUND_MESSAGE = "Product not found"


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def parse_price(raw: Optional[str], allow_zero: bool) -> float:
    """Parse a form price; must be finite and positive (or non-negative)"""
    requirement = "a non-negative number" if allow_zero else "a positive number"
    try:
        price = float(str(raw).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"Price must be {requirement}", field="price")
    if not math.isfinite(price) or price < 0 or (price == 0 and not allow_zero):
        raise ValidationError(f"Price must be {requirement}", field="price")
    return price


def has_upload(image: Optional[UploadFile]) -> bool:
    # Browsers submit an empty part when the file input is left blank
    return image is not None and bool(image.filename)


class ProductService:
    @staticmethod
    def _discard_image(public_path: Optional[str]) -> None:
        """Best-effort removal of a stored image; failures are only logged"""
        if not storage.is_local(public_path):
            return
        try:
            storage.delete_image(public_path)
        except OSError as e:
            logger.warning(f"Failed to delete image file {public_path}: {e}")

    @staticmethod
    async def _save_image(image: UploadFile) -> str:
        try:
            return await storage.save_image(image)
        except OSError:
            logger.exception(f"Failed to store image {image.filename}")
            raise ServerError("Server error while saving image")

    @staticmethod
    def _load(db: Session, product_id: str) -> Product:
        try:
            product = (
                db.query(Product)
                .options(joinedload(Product.vendor))
                .filter(Product.id == product_id)
                .first()
            )
        except SQLAlchemyError:
            logger.exception(f"Failed to load product {product_id}")
            raise ServerError("Server error while fetching product")
        if product is None:
            raise NotFoundError(PRODUCT_NOT_FOUND_MESSAGE)
        return product

    @staticmethod
    def _commit(db: Session, product: Product, error_message: str) -> Product:
        try:
            db.commit()
            db.refresh(product)
        except SQLAlchemyError:
            db.rollback()
            logger.exception(error_message)
            raise ServerError(error_message)
        return product

    @staticmethod
    async def create_product(
        db: Session,
        principal: Principal,
        title: Optional[str],
        description: Optional[str],
        price: Optional[str],
        image: Optional[UploadFile] = None,
    ) -> Product:
        """Create a product owned by the calling vendor"""
        if not can_create_products(principal):
            raise AuthzError("Only vendors can add products")

        if _blank(title):
            raise ValidationError("Title is required", field="title")
        if _blank(price):
            raise ValidationError("Price is required", field="price")
        parsed_price = parse_price(price, allow_zero=False)

        image_path = ""
        if has_upload(image):
            image_path = await ProductService._save_image(image)

        product = Product(
            title=title.strip(),
            description=(description or "").strip(),
            price=parsed_price,
            image=image_path,
            vendor_id=principal.user_id,
        )
        db.add(product)
        ProductService._commit(db, product, "Server error while adding product")

        logger.info(f"Vendor {principal.user_id} added product {product.id}")
        return ProductService._load(db, product.id)

    @staticmethod
    def list_products(db: Session) -> List[Product]:
        """All products, newest first"""
        try:
            return (
                db.query(Product)
                .options(joinedload(Product.vendor))
                .order_by(Product.created_at.desc())
                .all()
            )
        except SQLAlchemyError:
            logger.exception("Failed to list products")
            raise ServerError("Server error while fetching products")

    @staticmethod
    def get_product(db: Session, product_id: str) -> Product:
        return ProductService._load(db, product_id)

    @staticmethod
    def list_vendor_products(db: Session, vendor_id: str, principal: Principal) -> List[Product]:
        """A vendor's products, newest first; visible to that vendor and admins"""
        if not can_view_vendor_products(principal, vendor_id):
            raise AuthzError("Not authorized to view these products")
        try:
            return (
                db.query(Product)
                .options(joinedload(Product.vendor))
                .filter(Product.vendor_id == vendor_id)
                .order_by(Product.created_at.desc())
                .all()
            )
        except SQLAlchemyError:
            logger.exception(f"Failed to list products for vendor {vendor_id}")
            raise ServerError("Server error while fetching vendor products")

    @staticmethod
    async def update_product(
        db: Session,
        product_id: str,
        principal: Principal,
        title: Optional[str] = None,
        description: Optional[str] = None,
        price: Optional[str] = None,
        image: Optional[UploadFile] = None,
    ) -> Product:
        """
        Apply a partial update.

        Blank or missing fields keep their stored value. A new image
        replaces the old one, whose file is removed best-effort.
        """
        product = ProductService._load(db, product_id)
        if not can_manage_product(principal, product.vendor_id):
            raise AuthzError("Not authorized to edit this product")

        if not _blank(price):
            product.price = parse_price(price, allow_zero=True)
        if not _blank(title):
            product.title = title.strip()
        if not _blank(description):
            product.description = description.strip()

        if has_upload(image):
            new_image = await ProductService._save_image(image)
            ProductService._discard_image(product.image)
            product.image = new_image

        ProductService._commit(db, product, "Server error while editing product")

        logger.info(f"Product {product.id} updated by {principal.user_id}")
        return ProductService._load(db, product.id)

    @staticmethod
    def delete_product(db: Session, product_id: str, principal: Principal) -> None:
        """Remove a product and, best-effort, its stored image"""
        product = ProductService._load(db, product_id)
        if not can_manage_product(principal, product.vendor_id):
            raise AuthzError("Not authorized to delete this product")

        ProductService._discard_image(product.image)

        try:
            db.delete(product)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Failed to delete product {product_id}")
            raise ServerError("Server error while deleting product")

        logger.info(f"Product {product_id} deleted by {principal.user_id}")


product_service = ProductService()
