# utils/tokenJWT.py
from jose import jwt, JWTError
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from config import settings
from schemas.profile import Identity

# Authorization schemes; the optional one lets guests through without a header
bearer_scheme = HTTPBearer()
optional_bearer_scheme = HTTPBearer(auto_error=False)

def _groups_from_claims(payload: dict) -> list:
    groups = payload.get("groups", payload.get("cognito:groups"))
    if groups is None:
        return []
    if isinstance(groups, str):
        return [groups]
    return [str(g) for g in groups]

# Decode and verify a bearer token into the caller identity
def decode_identity(token: str) -> Identity:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise credentials_exception

    email: Optional[str] = payload.get("email") or payload.get("sub")
    # Ensure email is present in the token payload
    if not email:
        raise credentials_exception

    groups = _groups_from_claims(payload)
    name = payload.get("name") or payload.get("given_name") or email.split("@")[0]
    return Identity(email=email, name=name, groups=groups, is_admin=settings.ADMIN_GROUP in groups)

# Retrieve the currently authenticated identity from the bearer token
def get_current_identity(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> Identity:
    return decode_identity(credentials.credentials)

# Same as get_current_identity, but returns None for anonymous (guest) callers
def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_bearer_scheme),
) -> Optional[Identity]:
    if credentials is None:
        return None
    return decode_identity(credentials.credentials)

# Dependency that only lets members of the admin group through
def admin_required(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden"
        )
    return identity
