# backend/schemas/profile.py
from pydantic import AliasGenerator, BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional

# City value meaning "Other"; the real city is then given in custom_city
OTHER_CITY = "Tjetër"


# Shared address fields. Input accepts the client camelCase names as well, output stays snake_case.
class AddressBase(BaseModel):
    model_config = ConfigDict(
        alias_generator=AliasGenerator(validation_alias=to_camel), populate_by_name=True
    )

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    country: str = ""
    city: str = ""
    custom_city: Optional[str] = None
    address: str = ""
    postal_code: str = ""
    phone: str = ""

    @property
    def display_city(self) -> str:
        if self.city == OTHER_CITY and self.custom_city:
            return self.custom_city
        return self.city


# Address as stored on a profile or on an order
class Address(AddressBase):
    id: str
    is_default: bool = False


# Input schema for adding or editing an address
class AddressCreate(AddressBase):
    is_default: bool = False

    @model_validator(mode="after")
    def check_custom_city(self):
        if self.city == OTHER_CITY and not (self.custom_city or "").strip():
            raise ValueError("custom_city is required when city is 'Tjetër'")
        return self


# Caller identity as asserted by the identity provider token
class Identity(BaseModel):
    email: str
    name: Optional[str] = None
    groups: List[str] = []
    is_admin: bool = False


# Output schema for a storefront profile
class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: Optional[str] = None
    role: str
    addresses: List[Address]
