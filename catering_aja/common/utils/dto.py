from typing import Any, Dict, Iterable, List, Type

from ..schemas import (
    ApiModel,
    AreaOut,
    CategoryOut,
    OrderItemOut,
    OrderOut,
    ProductOut,
    PromoOut,
    SiteSettingsOut,
    UserOut,
)


def to_dto(schema: Type[ApiModel], row: Any) -> Dict:
    return schema.model_validate(row).model_dump(by_alias=True, mode="json")


def to_dtos(schema: Type[ApiModel], rows: Iterable[Any]) -> List[Dict]:
    return [to_dto(schema, r) for r in rows]


def to_user_dto(row: Any) -> Dict:
    # UserOut has no password field, so the hash never leaves the server
    return to_dto(UserOut, row)


def to_category_dto(row: Any) -> Dict:
    return to_dto(CategoryOut, row)


def to_area_dto(row: Any) -> Dict:
    return to_dto(AreaOut, row)


def to_product_dto(row: Any) -> Dict:
    return to_dto(ProductOut, row)


def to_promo_dto(row: Any) -> Dict:
    return to_dto(PromoOut, row)


def to_order_dto(row: Any) -> Dict:
    """Order with its items; call inside the session that loaded ``row``."""
    return to_dto(OrderOut, row)


def to_order_item_dto(row: Any) -> Dict:
    return to_dto(OrderItemOut, row)


def to_settings_dto(row: Any) -> Dict:
    return to_dto(SiteSettingsOut, row)
