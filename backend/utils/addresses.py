# backend/utils/addresses.py
import uuid
from typing import List

from schemas.profile import Address, AddressCreate


# Address book operations. Each returns a new list; at most one address is default.

def _new_address_id() -> str:
    return uuid.uuid4().hex[:12]

def _index_of(addresses: List[Address], address_id: str) -> int:
    for i, addr in enumerate(addresses):
        if addr.id == address_id:
            return i
    raise KeyError(address_id)

def add_address(addresses: List[Address], data: AddressCreate) -> List[Address]:
    # The first address becomes the default one
    fields = data.model_dump(exclude={"is_default"})
    new_address = Address(id=_new_address_id(), is_default=len(addresses) == 0, **fields)
    return [*addresses, new_address]

def edit_address(addresses: List[Address], address: Address) -> List[Address]:
    idx = _index_of(addresses, address.id)
    updated = list(addresses)
    updated[idx] = address
    if address.is_default:
        updated = [a if a.id == address.id else a.model_copy(update={"is_default": False}) for a in updated]
    return updated

def set_default_address(addresses: List[Address], address_id: str) -> List[Address]:
    _index_of(addresses, address_id)
    return [a.model_copy(update={"is_default": a.id == address_id}) for a in addresses]

def delete_address(addresses: List[Address], address_id: str) -> List[Address]:
    _index_of(addresses, address_id)
    return [a for a in addresses if a.id != address_id]
