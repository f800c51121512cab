"""Request/response schemas for the REST API.

Field names are snake_case in Python and camelCase on the wire; every model
accepts either form on input. Output models are built straight from ORM rows
(``from_attributes``) and dumped with ``by_alias=True, mode="json"`` so money
goes out as decimal strings and dates as ISO strings.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .utils.validators import to_date


PaymentMethod = Literal["cod", "transfer", "ewallet"]
DiscountType = Literal["percent", "amount"]
Role = Literal["admin", "customer"]
SelectionMode = Literal["single", "multi"]

ORDER_STATUSES = (
    "pending",
    "processing",
    "confirmed",
    "preparing",
    "shipped",
    "delivering",
    "completed",
    "cancelled",
)

# money goes out with two decimals
Money = Annotated[Decimal, PlainSerializer(lambda v: f"{v:.2f}", return_type=str, when_used="json")]


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


def _coerce_date(value: Any) -> Any:
    value = _blank_to_none(value)
    if isinstance(value, datetime):
        return value.date()
    if value is None or isinstance(value, date):
        return value
    try:
        return to_date(value)
    except ValueError:
        # let pydantic report the original input
        return value


# --- customization -------------------------------------------------------


class CustomizationOption(ApiModel):
    name: str = Field(..., min_length=1)
    harga: Decimal = Field(Decimal("0"), ge=0)

    blank_harga_to_zero = field_validator("harga", mode="before")(lambda v: 0 if _blank_to_none(v) is None else v)


class CustomizationGroup(ApiModel):
    """One option group of a product, e.g. "Nasi" (single) or "Ekstra" (multi)."""

    type: str = Field(..., min_length=1)
    selection_mode: SelectionMode = "single"
    required: Optional[bool] = None
    options: List[CustomizationOption] = Field(default_factory=list)

    @model_validator(mode="after")
    def _default_required(self):
        if self.required is None:
            self.required = self.selection_mode == "single"
        return self


def parse_customization_groups(raw: Optional[List[Any]]) -> List[CustomizationGroup]:
    return [CustomizationGroup.model_validate(g) for g in (raw or [])]


def dump_customization_groups(groups: List[CustomizationGroup]) -> List[Dict[str, Any]]:
    return [g.model_dump(by_alias=True, mode="json") for g in groups]


# --- auth / users --------------------------------------------------------


class LoginRequest(ApiModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterRequest(ApiModel):
    username: str = Field(..., min_length=1, max_length=128)
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None


class UserCreate(RegisterRequest):
    name: Optional[str] = None
    role: Role = "customer"


class UserUpdate(ApiModel):
    username: Optional[str] = Field(None, min_length=1, max_length=128)
    password: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[Role] = None

    blank_password_to_none = field_validator("password", mode="before")(_blank_to_none)


class UserOut(ApiModel):
    id: int
    username: str
    role: str
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None


# --- catalog -------------------------------------------------------------


class CategoryCreate(ApiModel):
    name: str = Field(..., min_length=1)
    slug: Optional[str] = None
    is_active: bool = True
    parent_id: Optional[int] = None


class CategoryUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1)
    slug: Optional[str] = None
    is_active: Optional[bool] = None
    parent_id: Optional[int] = None


class CategoryOut(ApiModel):
    id: int
    name: str
    slug: str
    is_active: bool
    parent_id: Optional[int] = None


class AreaCreate(ApiModel):
    name: str = Field(..., min_length=1)
    delivery_fee: Optional[Decimal] = Field(None, ge=0)
    service_fee: Optional[Decimal] = Field(None, ge=0)
    is_active: bool = True

    blank_fees_to_none = field_validator("delivery_fee", "service_fee", mode="before")(_blank_to_none)


class AreaUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1)
    delivery_fee: Optional[Decimal] = Field(None, ge=0)
    service_fee: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None

    blank_fees_to_none = field_validator("delivery_fee", "service_fee", mode="before")(_blank_to_none)


class AreaOut(ApiModel):
    id: int
    name: str
    slug: str
    is_active: bool
    delivery_fee: Money
    service_fee: Money
    created_at: Optional[datetime] = None


class ProductCreate(ApiModel):
    name: str = Field(..., min_length=1)
    slug: Optional[str] = None
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    original_price: Optional[Decimal] = Field(None, ge=0)
    image: Optional[str] = None
    category_id: int
    area_id: Optional[int] = None
    badge: Optional[str] = None
    customization_options: List[CustomizationGroup] = Field(default_factory=list)
    min_order_qty: Optional[int] = Field(None, ge=1)
    is_active: bool = True
    is_featured: bool = False

    blanks_to_none = field_validator("price", "original_price", "min_order_qty", "area_id", mode="before")(_blank_to_none)


class ProductUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1)
    slug: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    original_price: Optional[Decimal] = Field(None, ge=0)
    image: Optional[str] = None
    category_id: Optional[int] = None
    area_id: Optional[int] = None
    badge: Optional[str] = None
    customization_options: Optional[List[CustomizationGroup]] = None
    min_order_qty: Optional[int] = Field(None, ge=1)
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None

    blanks_to_none = field_validator("price", "original_price", "min_order_qty", mode="before")(_blank_to_none)


class ProductOut(ApiModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    price: Money
    original_price: Optional[Money] = None
    image: Optional[str] = None
    category_id: int
    area_id: Optional[int] = None
    rating: Decimal = Decimal("0")
    rating_count: int = 0
    is_active: bool = True
    is_featured: bool = False
    badge: Optional[str] = None
    customization_options: List[CustomizationGroup] = Field(default_factory=list)
    min_order_qty: int = 1
    created_at: Optional[datetime] = None

    null_options_to_list = field_validator("customization_options", mode="before")(lambda v: v or [])


# --- promos --------------------------------------------------------------


class PromoCreate(ApiModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    code: str = Field(..., min_length=1, max_length=64)
    discount_type: DiscountType
    discount_value: Decimal = Field(..., ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool = True

    coerce_dates = field_validator("start_date", "end_date", mode="before")(_coerce_date)

    @field_validator("code")
    @classmethod
    def _strip_code(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("code must not be blank")
        return value

    @model_validator(mode="after")
    def _check_window(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        if self.discount_type == "percent" and self.discount_value > 100:
            raise ValueError("percent discount must be <= 100")
        return self


class PromoUpdate(ApiModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    code: Optional[str] = Field(None, min_length=1, max_length=64)
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Decimal] = Field(None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: Optional[bool] = None

    coerce_dates = field_validator("start_date", "end_date", mode="before")(_coerce_date)

    @model_validator(mode="after")
    def _check_window(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self


class PromoOut(ApiModel):
    id: int
    title: str
    description: Optional[str] = None
    code: str
    discount_type: str
    discount_value: Money
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool = True


class PromoCodeRequest(ApiModel):
    code: str = Field(..., min_length=1)


# --- orders --------------------------------------------------------------


class OrderItemInput(ApiModel):
    product_id: int
    product_name: Optional[str] = None
    product_image: Optional[str] = None
    delivery_date: Optional[date] = None
    delivery_time: Optional[str] = None
    quantity: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=0)
    customization: Dict[str, Union[str, List[str], None]] = Field(default_factory=dict)
    total: Optional[Decimal] = None

    coerce_delivery_date = field_validator("delivery_date", mode="before")(_coerce_date)
    blank_time_to_none = field_validator("delivery_time", mode="before")(_blank_to_none)
    null_customization_to_dict = field_validator("customization", mode="before")(lambda v: v or {})


class OrderFields(ApiModel):
    customer_name: str = Field(..., min_length=1)
    customer_phone: str = Field(..., min_length=1)
    customer_address: str = Field(..., min_length=1)
    payment_method: PaymentMethod
    delivery_date: Optional[date] = None
    subtotal: Optional[Decimal] = None
    delivery_fee: Optional[Decimal] = None
    service_fee: Optional[Decimal] = None
    discount: Optional[Decimal] = None
    total: Optional[Decimal] = None
    promo_code: Optional[str] = None
    area_id: Optional[int] = None
    area_slug: Optional[str] = None

    coerce_delivery_date = field_validator("delivery_date", mode="before")(_coerce_date)
    blanks_to_none = field_validator("promo_code", "area_slug", mode="before")(_blank_to_none)


class OrderInput(OrderFields):
    items: List[OrderItemInput] = Field(..., min_length=1)


class SingleOrderRequest(ApiModel):
    order: OrderFields
    items: List[OrderItemInput] = Field(..., min_length=1)

    def as_order_input(self) -> OrderInput:
        return OrderInput(**self.order.model_dump(), items=self.items)


class BatchOrderRequest(ApiModel):
    orders: List[OrderInput] = Field(..., min_length=1)


class OrderStatusUpdate(ApiModel):
    status: str = Field(..., min_length=1, max_length=32)

    @field_validator("status")
    @classmethod
    def _normalize(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise ValueError("status is required")
        return value


class OrderItemOut(ApiModel):
    id: int
    order_id: int
    product_id: int
    product_name: str
    product_image: Optional[str] = None
    delivery_date: date
    delivery_time: str
    quantity: int
    price: Money
    customization: Optional[Dict[str, Any]] = None
    total: Money


class OrderOut(ApiModel):
    id: int
    code: str
    user_id: Optional[int] = None
    customer_name: str
    customer_phone: str
    customer_address: str
    delivery_date: Optional[date] = None
    subtotal: Money
    delivery_fee: Money
    service_fee: Money
    discount: Money
    total: Money
    payment_method: str
    status: str
    promo_code: Optional[str] = None
    created_at: Optional[datetime] = None
    items: List[OrderItemOut] = Field(default_factory=list)


# --- site settings -------------------------------------------------------


class SiteSettingsUpdate(ApiModel):
    model_config = ConfigDict(extra="ignore")

    site_name: Optional[str] = Field(None, min_length=1)
    title: Optional[str] = Field(None, min_length=1)
    logo_url: Optional[str] = None
    favicon_url: Optional[str] = None
    promo_banner_enabled: Optional[bool] = None
    promo_banner_text: Optional[str] = None
    promo_banner_background_color: Optional[str] = None
    promo_banner_text_color: Optional[str] = None
    company_name: Optional[str] = None
    company_phone: Optional[str] = None
    company_address: Optional[str] = None


class SiteSettingsOut(ApiModel):
    id: int
    site_name: str
    title: str
    logo_url: Optional[str] = None
    favicon_url: Optional[str] = None
    promo_banner_enabled: bool = False
    promo_banner_text: Optional[str] = None
    promo_banner_background_color: Optional[str] = None
    promo_banner_text_color: Optional[str] = None
    company_name: Optional[str] = None
    company_phone: Optional[str] = None
    company_address: Optional[str] = None
