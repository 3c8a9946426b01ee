from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field
from pydantic.config import ConfigDict

# Store columns are 32-bit integers
INT32_MIN = -2**31
INT32_MAX = 2**31 - 1


def camel(attr: str, name: str, **kwargs):
    # Read from ORM attribute or camelCase key; always write camelCase
    return Field(validation_alias=AliasChoices(name, attr), serialization_alias=name, **kwargs)


class Credentials(BaseModel):
    email: str = Field(..., max_length=256)
    password: str = Field(..., max_length=256)


class TokenResponse(BaseModel):
    token: str


class InventoryItemCreate(BaseModel):
    name: str
    quantity: int = Field(..., ge=INT32_MIN, le=INT32_MAX)
    location: str = ""


class InventoryItemRead(BaseModel):
    item_id: int = camel("id", "itemId")
    name: str
    quantity: int
    location: str
    order_id: Optional[int] = camel("order_id", "orderId", default=None)

    model_config = ConfigDict(from_attributes=True)


class OrderItemCreate(BaseModel):
    name: str
    quantity: int = Field(..., ge=INT32_MIN, le=INT32_MAX)
    location: str = ""


class OrderCreate(BaseModel):
    customer_name: str = Field(..., alias="customerName")
    date_placed: Optional[datetime] = Field(default=None, alias="datePlaced")
    items: List[OrderItemCreate] = []

    model_config = ConfigDict(populate_by_name=True)


class OrderRead(BaseModel):
    order_id: int = camel("id", "orderId")
    customer_name: str = camel("customer_name", "customerName")
    date_placed: datetime = camel("date_placed", "datePlaced")
    items: List[InventoryItemRead] = []

    model_config = ConfigDict(from_attributes=True)


class OrderSummary(BaseModel):
    order_id: int = camel("id", "orderId")
    customer_name: str = camel("customer_name", "customerName")
    date_placed: datetime = camel("date_placed", "datePlaced")
    item_count: int = camel("item_count", "itemCount")

    model_config = ConfigDict(from_attributes=True)
