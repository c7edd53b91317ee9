"""
Backend DTOs and form schemas.

Everything that crosses the backend boundary is parsed into one of these
models; a response that does not fit raises SchemaError instead of leaking a
half-shaped dict into the services. Wire names are camelCase, attributes are
snake_case.
"""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Generic, List, Literal, Optional, TypeVar

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .errors import SchemaError, ValidationFailed
from .services.order_status import OrderStatus, PaymentMethod, PaymentStatus

T = TypeVar("T")


def jsonable(value):
    """Plain JSON values: whole Decimals as ints, dates as ISO strings."""
    if isinstance(value, BaseModel):
        value = value.model_dump()
    if isinstance(value, dict):
        return {k: jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


class Dto(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict:
        return jsonable(self.model_dump(by_alias=True))

    def as_api(self) -> dict:
        return jsonable(self)


def parse(model, data):
    """Validate backend data into `model`, raising SchemaError on mismatch."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise SchemaError(f"unexpected {getattr(model, '__name__', 'response')} shape: {e.error_count()} error(s)") from e


def parse_form(model, data):
    """Validate user input into `model`, raising ValidationFailed per field."""
    try:
        return model.model_validate(data or {})
    except ValidationError as e:
        # report snake_case field names whether the input used aliases or not
        names = {(f.alias or n): n for n, f in model.model_fields.items()}
        errors = {}
        for item in e.errors():
            loc = [names.get(p, p) if i == 0 else p for i, p in enumerate(item["loc"])]
            field = ".".join(str(p) for p in loc) or "form"
            errors.setdefault(field, item["msg"].removeprefix("Value error, "))
        raise ValidationFailed(errors) from e


# ---------------------------------------------------------------- envelope --

class ApiEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: Literal["SUCCESS", "ERROR"]
    message: Optional[str] = None
    data: Any = None


class Page(Dto, Generic[T]):
    content: List[T] = Field(default_factory=list)
    total_pages: int = 0
    total_elements: int = 0
    number: int = 0
    size: int = 0

    def as_api(self):
        # back to the 1-based page the callers use
        return {
            "items": [jsonable(i) for i in self.content],
            "page": self.number + 1,
            "size": self.size,
            "total_pages": self.total_pages,
            "total": self.total_elements,
        }


# ------------------------------------------------------------------- auth --

class LoginData(Dto):
    access_token: str
    id: int | str
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: str
    roles: List[str] = Field(default_factory=list)
    avatar: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[str] = None
    dob: Optional[str] = None
    street_address: Optional[str] = None
    province_code: Optional[int] = None
    province_name: Optional[str] = None
    district_code: Optional[int] = None
    district_name: Optional[str] = None
    ward_code: Optional[int] = None
    ward_name: Optional[str] = None

    def user_snapshot(self) -> dict:
        return self.model_dump(mode="json", exclude={"access_token"})


class LoginForm(BaseModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _email(cls, v):
        return v.strip().lower()


class RegisterForm(Dto):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: str = Field(pattern=r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
    password: str = Field(min_length=6)


class ProfileForm(Dto):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    phone: Optional[str] = Field(default=None, pattern=r"^\d*$")
    gender: Optional[str] = None
    dob: Optional[date] = None
    avatar: Optional[str] = None


class AddressForm(Dto):
    street_address: str = Field(min_length=1)
    province_code: int
    province_name: str
    district_code: int
    district_name: str
    ward_code: int
    ward_name: str


class PasswordForm(Dto):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6)
    confirmation_password: str

    @model_validator(mode="after")
    def _matches(self):
        if self.new_password != self.confirmation_password:
            raise ValueError("passwords do not match")
        return self


# ---------------------------------------------------------------- catalog --

class Category(Dto):
    id: int
    name: str
    image_url: Optional[str] = None
    description: Optional[str] = None
    active: bool = True
    product_count: int = 0


class Brand(Dto):
    id: int
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    active: bool = True
    product_count: int = 0


class Product(Dto):
    id: int
    name: str
    description: Optional[str] = None
    price: Decimal = Decimal("0")
    image_url: Optional[str] = None
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    brand_id: Optional[int] = None
    brand_name: Optional[str] = None
    promotion_id: Optional[int] = None
    promotion_name: Optional[str] = None
    sale_price: Optional[Decimal] = None
    created_at: Optional[datetime] = None
    active: bool = True
    is_category_active: Optional[bool] = None
    is_brand_active: Optional[bool] = None
    is_promotion_still_valid: Optional[bool] = None
    variant_count: int = 0


class Variant(Dto):
    id: int
    sku: str
    product_id: Optional[int] = None
    product_name: Optional[str] = None
    price: Decimal
    stock_quantity: int = 0
    image_url: Optional[str] = None
    active: bool = True
    created_at: Optional[datetime] = None
    attributes: Dict[str, str] = Field(default_factory=dict)
    order_count: int = 0
    sale_price: Optional[Decimal] = None
    is_promotion_still_valid: Optional[bool] = None

    def attributes_description(self) -> str:
        return ", ".join(f"{k}: {v}" for k, v in self.attributes.items())

    def effective_price(self) -> Decimal:
        if self.sale_price is not None and self.is_promotion_still_valid:
            return self.sale_price
        return self.price


class CategoryForm(Dto):
    name: str = Field(min_length=1)
    image_url: Optional[str] = None
    description: Optional[str] = None
    active: bool = True

    @field_validator("name")
    @classmethod
    def _strip(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class BrandForm(CategoryForm):
    pass


class ProductForm(Dto):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: Decimal = Field(ge=0)
    image_url: Optional[str] = None
    category_id: Optional[int] = None
    brand_id: Optional[int] = None
    promotion_id: Optional[int] = None
    active: bool = True


class VariantEditForm(Dto):
    sku: str = Field(min_length=1)
    price: Decimal = Field(gt=0)
    stock_quantity: int = Field(ge=0)
    image_url: Optional[str] = None
    active: bool = True

    @field_validator("sku")
    @classmethod
    def _sku(cls, v):
        return v.strip().upper()


class VariantForm(VariantEditForm):
    """New variant: the product and its attribute values are fixed at creation."""
    product_id: int
    attribute_value_ids: List[int] = Field(default_factory=list)


# ------------------------------------------------------ coupons & promos --

class Coupon(Dto):
    id: Optional[int] = None
    code: str
    description: Optional[str] = None
    discount_value: Decimal
    max_discount_amount: Optional[Decimal] = None
    min_order_amount: Optional[Decimal] = None
    usage_limit: Optional[int] = None
    used_count: int = 0
    start_date: date
    end_date: date
    active: bool = True

    @field_validator("code")
    @classmethod
    def _code(cls, v):
        return v.strip().upper()


class Promotion(Dto):
    id: Optional[int] = None
    name: str
    description: Optional[str] = None
    discount_value: Decimal
    max_discount_amount: Optional[Decimal] = None
    min_order_amount: Optional[Decimal] = None
    start_date: date
    end_date: date
    active: bool = True
    product_ids: List[int] = Field(default_factory=list)


class _DiscountForm(Dto):
    description: Optional[str] = None
    discount_value: Decimal = Field(gt=0, le=100)
    max_discount_amount: Optional[Decimal] = Field(default=None, gt=0)
    min_order_amount: Optional[Decimal] = Field(default=None, ge=0)
    start_date: date
    end_date: date
    active: bool = True

    @model_validator(mode="after")
    def _window(self):
        if self.start_date > self.end_date:
            raise ValueError("end date must not be before start date")
        return self


class CouponForm(_DiscountForm):
    code: str
    # 0 from the backend also means unlimited; the form only accepts >= 1
    usage_limit: Optional[int] = Field(default=None, ge=1)

    @field_validator("code")
    @classmethod
    def _code(cls, v):
        v = v.strip().upper()
        if not v:
            raise ValueError("coupon code cannot be empty")
        return v


class PromotionForm(_DiscountForm):
    name: str = Field(min_length=1)
    product_ids: List[int] = Field(default_factory=list)


# ------------------------------------------------------------------ users --

class UserAccount(Dto):
    id: int
    name: Optional[str] = None
    email: str
    phone: Optional[str] = None
    position: Optional[str] = None
    roles: List[str] = Field(default_factory=list)
    active: bool = True
    created_at: Optional[datetime] = None
    order_count: int = 0


class EmployeeForm(Dto):
    name: str = Field(min_length=1)
    email: str = Field(pattern=r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
    phone: Optional[str] = Field(default=None, pattern=r"^\d*$")
    position: str = Field(min_length=1)
    active: bool = True
    password: Optional[str] = Field(default=None, min_length=6)


class CustomerForm(Dto):
    name: str = Field(min_length=1)
    email: str = Field(pattern=r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
    phone: Optional[str] = Field(default=None, pattern=r"^\d*$")
    active: bool = True


# ----------------------------------------------------------------- orders --

class AdminOrder(Dto):
    id: int
    order_number: str
    customer_name: str
    created_at: Optional[datetime] = None
    total_amount: Decimal
    order_status: OrderStatus
    payment_status: PaymentStatus
    payment_method: PaymentMethod
    stock_returned: bool = False


class OrderItem(Dto):
    variant_id: int
    product_name: Optional[str] = None
    variant_info: Optional[str] = None
    quantity: int
    price: Decimal
    image_url: Optional[str] = None


class OrderDetail(Dto):
    id: int
    order_number: str
    created_at: Optional[datetime] = None
    order_status: OrderStatus
    payment_status: PaymentStatus
    payment_method: PaymentMethod
    customer_name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    note: Optional[str] = None
    subtotal: Decimal
    shipping_fee: Decimal = Decimal("0")
    discount_amount: Decimal = Field(
        default=Decimal("0"),
        validation_alias=AliasChoices("discountAmount", "couponDiscount", "discount_amount"),
    )
    coupon_code: Optional[str] = None
    total_amount: Decimal
    tracking_code: Optional[str] = None
    items: List[OrderItem] = Field(default_factory=list)
    stock_returned: bool = False


class UserOrder(Dto):
    id: int
    order_number: str
    created_at: Optional[datetime] = None
    total_amount: Decimal
    order_status: OrderStatus
    total_items: int = 0


class StatusChange(Dto):
    status: OrderStatus
    tracking_code: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _upper(cls, v):
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("tracking_code")
    @classmethod
    def _tracking(cls, v):
        v = (v or "").strip()
        return v or None


class CheckoutForm(Dto):
    customer_name: str = Field(min_length=1)
    phone: str = Field(pattern=r"^\d{9,11}$")
    email: Optional[str] = None
    street_address: str = Field(min_length=1)
    ward_name: Optional[str] = None
    district_name: Optional[str] = None
    province_name: Optional[str] = None
    note: Optional[str] = None
    payment_method: PaymentMethod = PaymentMethod.COD
    coupon_code: Optional[str] = None

    @field_validator("customer_name", "street_address")
    @classmethod
    def _strip(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty")
        return v

    @field_validator("coupon_code")
    @classmethod
    def _code(cls, v):
        v = (v or "").strip().upper()
        return v or None

    def full_address(self) -> str:
        parts = [self.street_address, self.ward_name, self.district_name, self.province_name]
        return ", ".join(p for p in parts if p)


class AdminOrderLine(Dto):
    variant_id: int
    quantity: int = Field(ge=1)
    price: Decimal = Field(ge=0)


class AdminOrderForm(CheckoutForm):
    items: List[AdminOrderLine] = Field(min_length=1)


# ---------------------------------------------------------------- address --

class Ward(BaseModel):
    model_config = ConfigDict(extra="ignore")
    code: int
    name: str


class District(BaseModel):
    model_config = ConfigDict(extra="ignore")
    code: int
    name: str
    wards: List[Ward] = Field(default_factory=list)


class Province(BaseModel):
    model_config = ConfigDict(extra="ignore")
    code: int
    name: str
    districts: List[District] = Field(default_factory=list)
