# backend/routes/profile.py
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from database import get_db
from utils.tokenJWT import get_current_identity
from utils.audit import write_log
from utils import addresses as address_book
from models.profile import UserProfile
from schemas.profile import Address, AddressCreate, Identity, ProfileOut

router = APIRouter(prefix="/profile", tags=["Profile"])


def _role_for(identity: Identity) -> str:
    return "admin" if identity.is_admin else "user"

# Find the caller's profile, creating it on first use; the role always follows identity groups
def _sync_profile(db: Session, identity: Identity) -> UserProfile:
    profile = db.query(UserProfile).filter(UserProfile.email == identity.email).first()
    if not profile:
        profile = UserProfile(email=identity.email, name=identity.name, role=_role_for(identity), addresses=[])
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile

    if profile.role != _role_for(identity):
        profile.role = _role_for(identity)
        db.commit()
        db.refresh(profile)
    return profile

def _addresses_of(profile: UserProfile) -> List[Address]:
    return [Address.model_validate(a) for a in (profile.addresses or [])]

def _to_out(profile: UserProfile) -> ProfileOut:
    return ProfileOut(
        id=profile.id, email=profile.email, name=profile.name,
        role=profile.role, addresses=_addresses_of(profile),
    )

# Persist a new address list on the profile (last write wins)
def _save_addresses(db: Session, profile: UserProfile, addresses: List[Address], request: Request, action: str) -> ProfileOut:
    profile.addresses = [a.model_dump(mode="json") for a in addresses]
    db.commit()
    db.refresh(profile)
    write_log(
        db, actor_email=profile.email, action=action, resource="profile", status="SUCCESS",
        ip=request.client.host if request.client else None, meta={"addresses": len(addresses)},
    )
    return _to_out(profile)


@router.get("/me", response_model=ProfileOut)
def get_my_profile(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    return _to_out(_sync_profile(db, identity))


@router.post("/addresses", response_model=ProfileOut, status_code=201)
def add_address(
    payload: AddressCreate,
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    profile = _sync_profile(db, identity)
    updated = address_book.add_address(_addresses_of(profile), payload)
    return _save_addresses(db, profile, updated, request, "ADDRESS_ADD")


@router.put("/addresses/{address_id}", response_model=ProfileOut)
def edit_address(
    address_id: str,
    payload: AddressCreate,
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    profile = _sync_profile(db, identity)
    try:
        updated = address_book.edit_address(
            _addresses_of(profile), Address(id=address_id, **payload.model_dump())
        )
    except KeyError:
        raise HTTPException(status_code=404, detail="Address not found")
    return _save_addresses(db, profile, updated, request, "ADDRESS_EDIT")


@router.post("/addresses/{address_id}/default", response_model=ProfileOut)
def set_default_address(
    address_id: str,
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    profile = _sync_profile(db, identity)
    try:
        updated = address_book.set_default_address(_addresses_of(profile), address_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Address not found")
    return _save_addresses(db, profile, updated, request, "ADDRESS_DEFAULT")


@router.delete("/addresses/{address_id}", response_model=ProfileOut)
def delete_address(
    address_id: str,
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
):
    profile = _sync_profile(db, identity)
    try:
        updated = address_book.delete_address(_addresses_of(profile), address_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Address not found")
    return _save_addresses(db, profile, updated, request, "ADDRESS_DELETE")
