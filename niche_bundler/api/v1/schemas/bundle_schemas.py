"""
Modelos Pydantic para la API de bundles.

Define los payloads de creación/actualización de bundles, el cálculo de
precio y las respuestas. Los bundles viajan en formato plano
(``discount_type`` / ``discount_value``), igual que en la base de datos.
"""

import re
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from niche_bundler.domain.models.bundle import BundleDomain
from niche_bundler.domain.value_objects import DiscountType, PriceResult

HANDLE_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class BundleLineItemSchema(BaseModel):
    """Producto/variante dentro de un bundle."""

    product_id: str = Field(..., min_length=1)
    variant_id: Optional[str] = None
    title: str
    price: Decimal = Field(..., ge=0)
    image: Optional[str] = None
    quantity: int = Field(default=1, ge=1)

    @field_validator("product_id", "variant_id", mode="before")
    @classmethod
    def coerce_ids(cls, v):
        """Shopify devuelve IDs numéricos o GIDs; se guardan como string."""
        if isinstance(v, int):
            return str(v)
        return v


def _validate_handle(v: str) -> str:
    if not HANDLE_PATTERN.match(v):
        raise ValueError("handle debe ser un slug en minúsculas (a-z, 0-9, guiones)")
    return v


def _validate_percentage(discount_type: Optional[DiscountType], discount_value: Optional[Decimal]) -> None:
    if discount_type == DiscountType.PERCENTAGE and discount_value is not None and discount_value > 100:
        raise ValueError("Un descuento porcentual no puede superar 100")


class BundleCreate(BaseModel):
    """Payload de creación: todos los campos requeridos salvo imágenes."""

    title: str = Field(..., min_length=1)
    handle: str = Field(..., min_length=1)
    products: List[BundleLineItemSchema] = Field(..., min_length=1)
    discount_type: DiscountType
    discount_value: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    shop_domain: str = Field(..., min_length=1)

    @field_validator("handle")
    @classmethod
    def check_handle(cls, v):
        return _validate_handle(v)

    @model_validator(mode="after")
    def check_percentage(self):
        _validate_percentage(self.discount_type, self.discount_value)
        return self


class BundleUpdate(BaseModel):
    """Payload de actualización parcial: cualquier subconjunto de campos salvo identidad."""

    title: Optional[str] = Field(default=None, min_length=1)
    handle: Optional[str] = Field(default=None, min_length=1)
    products: Optional[List[BundleLineItemSchema]] = Field(default=None, min_length=1)
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    active: Optional[bool] = None

    @field_validator("handle")
    @classmethod
    def check_handle(cls, v):
        return _validate_handle(v) if v is not None else v

    @model_validator(mode="after")
    def check_percentage(self):
        _validate_percentage(self.discount_type, self.discount_value)
        return self

    def changes(self) -> Dict[str, Any]:
        """Solo los campos enviados explícitamente."""
        data = self.model_dump(exclude_unset=True)
        if "discount_type" in data and data["discount_type"] is not None:
            data["discount_type"] = data["discount_type"].value
        return {key: value for key, value in data.items() if value is not None}


class BundleResponse(BaseModel):
    """Bundle tal como lo devuelve la API."""

    id: int
    title: str
    handle: str
    products: List[Dict[str, Any]]
    discount_type: str
    discount_value: float
    active: bool
    shop_domain: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, bundle: BundleDomain) -> "BundleResponse":
        return cls(**bundle.to_dict())


class BundleEnvelope(BaseModel):
    bundle: BundleResponse


class BundleListEnvelope(BaseModel):
    bundles: List[BundleResponse]


class PriceRequest(BaseModel):
    """
    Payload de cálculo de precio.

    Los productos se aceptan sin validar: el motor de precios normaliza
    precios y cantidades inválidos en lugar de rechazarlos.
    """

    products: List[Any]
    discount_type: Optional[Any] = None
    discount_value: Optional[Any] = None


class PriceResponse(BaseModel):
    """Montos como strings con dos decimales, más los productos recibidos."""

    original_price: str
    discount_amount: str
    final_price: str
    products: List[Any]

    @classmethod
    def from_result(cls, result: PriceResult, products: List[Any]) -> "PriceResponse":
        return cls(**result.to_dict(), products=products)
