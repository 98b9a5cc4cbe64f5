"""
Input schemas for the DineSmart API.

Each operation that accepts a body validates it against one of these models
before any database work happens. Request keys may be camelCase (as sent by
the web client) or snake_case.

Update schemas leave every field optional: a field that is absent (or null)
means "leave unchanged".
"""
import json
from typing import Annotated, Dict, List, Literal, Optional

from pydantic import (AliasChoices, BaseModel, ConfigDict, EmailStr, Field,
                      ValidationError, field_validator)

from .errors import InvalidInput
from .models import DEFAULT_PORTION


class Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


def parse(schema, data):
    try:
        return schema.model_validate(data or {})
    except ValidationError as e:
        error = e.errors()[0]
        field = '.'.join(str(part) for part in error['loc'])
        message = f"{field}: {error['msg']}" if field else error['msg']
        raise InvalidInput(message)


def changes(model):
    return model.model_dump(exclude_unset=True, exclude_none=True)


# ---------------------- Accounts ----------------------

class RegisterInput(Schema):
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Literal['SELLER', 'CUSTOMER']

    @field_validator('role', mode='before')
    @classmethod
    def upper_role(cls, value):
        return value.upper() if isinstance(value, str) else value

    @field_validator('email')
    @classmethod
    def lower_email(cls, value):
        return value.lower()


class LoginInput(Schema):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator('email')
    @classmethod
    def lower_email(cls, value):
        return value.lower()


class ResetRequestInput(Schema):
    email: EmailStr

    @field_validator('email')
    @classmethod
    def lower_email(cls, value):
        return value.lower()


class ResetPasswordInput(Schema):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, alias='newPassword')


# ---------------------- Orders ----------------------

class OrderLineInput(Schema):
    menu_item_id: int = Field(..., alias='menuItemId')
    portion: str = DEFAULT_PORTION
    quantity: int = Field(..., ge=1, validation_alias=AliasChoices('quantity', 'qty'))


class PlaceOrderInput(Schema):
    restaurant_id: int = Field(..., alias='restaurantId')
    items: List[OrderLineInput] = Field(..., min_length=1)


class OrderStatusInput(Schema):
    # Значение статуса проверяется после проверки владельца заказа
    status: str = Field(..., min_length=1)


# ---------------------- Catalog ----------------------

def _split_cuisines(value):
    if isinstance(value, str):
        return [part.strip() for part in value.split(',') if part.strip()]
    return value


PortionPrice = Annotated[float, Field(ge=0)]


def _load_portion_prices(value):
    if isinstance(value, str):
        if not value.strip():
            return {}
        try:
            return json.loads(value)
        except ValueError:
            raise ValueError('portionPrices must be a JSON object')
    return value


def _check_portions(value):
    # Цена regular задаётся полем price
    if value and DEFAULT_PORTION in value:
        raise ValueError(f"use price for the '{DEFAULT_PORTION}' portion")
    return value


class RestaurantInput(Schema):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    contact: Optional[str] = None
    address: Optional[str] = None
    cuisines: Optional[List[str]] = None
    opening_hours: Optional[str] = Field(None, alias='openingHours')
    image: Optional[str] = None

    @field_validator('cuisines', mode='before')
    @classmethod
    def split_cuisines(cls, value):
        return _split_cuisines(value)


class MenuItemInput(Schema):
    name: str = Field(..., min_length=1, max_length=100)
    price: float = Field(..., ge=0)
    stock: int = Field(0, ge=0)
    is_available: bool = Field(True, alias='isAvailable')
    portion_prices: Dict[str, PortionPrice] = Field(default_factory=dict, alias='portionPrices')
    image: Optional[str] = None

    @field_validator('portion_prices', mode='before')
    @classmethod
    def load_portion_prices(cls, value):
        return _load_portion_prices(value)

    @field_validator('portion_prices')
    @classmethod
    def check_portions(cls, value):
        return _check_portions(value)


class MenuItemUpdateInput(Schema):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    is_available: Optional[bool] = Field(None, alias='isAvailable')
    portion_prices: Optional[Dict[str, PortionPrice]] = Field(None, alias='portionPrices')
    image: Optional[str] = None

    @field_validator('portion_prices', mode='before')
    @classmethod
    def load_portion_prices(cls, value):
        return _load_portion_prices(value)

    @field_validator('portion_prices')
    @classmethod
    def check_portions(cls, value):
        return _check_portions(value)
