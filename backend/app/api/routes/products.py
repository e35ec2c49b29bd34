from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_serializer
from datetime import datetime
from app.core.database import get_db
from app.core.permissions import Principal
from app.api.dependencies import get_current_principal
from app.services.product_service import product_service

router = APIRouter(prefix="/products", tags=["products"])

# Field aliases keep the JSON shape the browser client reads (_id, vendorId, createdAt)


class VendorSummary(BaseModel):
    id: str = Field(serialization_alias="_id")
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class VendorDetail(VendorSummary):
    whatsapp_number: Optional[str] = Field(default=None, serialization_alias="whatsappNumber")


class ProductResponse(BaseModel):
    id: str = Field(serialization_alias="_id")
    title: str
    description: str
    price: float
    image: str
    vendor: Optional[VendorSummary] = Field(default=None, serialization_alias="vendorId")
    created_at: datetime = Field(serialization_alias="createdAt")

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('created_at')
    def serialize_created_at(self, value: datetime, _info):
        return value.isoformat() if value else None


class ProductDetailResponse(ProductResponse):
    vendor: Optional[VendorDetail] = Field(default=None, serialization_alias="vendorId")


class ProductMessageResponse(BaseModel):
    message: str
    product: ProductResponse


class MessageResponse(BaseModel):
    message: str


@router.post("", response_model=ProductMessageResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Add a product (vendors only)"""
    product = await product_service.create_product(
        db, principal, title=title, description=description, price=price, image=image
    )
    return {
        "message": "Product added successfully",
        "product": product,
    }


@router.get("", response_model=List[ProductResponse])
async def list_products(db: Session = Depends(get_db)):
    """List all products, newest first"""
    return product_service.list_products(db)


@router.get("/vendor/{vendor_id}", response_model=List[ProductResponse])
async def list_vendor_products(
    vendor_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """List one vendor's products (that vendor or an admin)"""
    return product_service.list_vendor_products(db, vendor_id, principal)


@router.get("/{product_id}", response_model=ProductDetailResponse)
async def get_product(product_id: str, db: Session = Depends(get_db)):
    """Get a single product with vendor contact details"""
    return product_service.get_product(db, product_id)


@router.put("/{product_id}", response_model=ProductMessageResponse)
async def update_product(
    product_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Edit a product (owning vendor or admin)"""
    product = await product_service.update_product(
        db, product_id, principal, title=title, description=description, price=price, image=image
    )
    return {
        "message": "Product updated successfully",
        "product": product,
    }


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Delete a product and its image (owning vendor or admin)"""
    product_service.delete_product(db, product_id, principal)
    return {"message": "Product deleted successfully"}
