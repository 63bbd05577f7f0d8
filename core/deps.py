import logging

from fastapi import Depends, HTTPException, Request, status
from typing import Annotated  # Use typing.Annotated for Python 3.9+

from core.config import MANAGER_ROLES
from core.firebase import get_firestore_client, verify_id_token

logger = logging.getLogger(__name__)

# Standard credentials exception
CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)


# Checks Firebase Auth Token, Returns the Opaque {id, name, email, role} Identity
async def get_current_user(request: Request):
    # 1) Extract & Analyze Authorization Header
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise CREDENTIALS_EXCEPTION
    token = auth_header.split(" ", 1)[1]

    # 2) Verify This Points to a Real User Account
    try:
        decoded = verify_id_token(token)
    except Exception as e:
        logger.info(f"Token verification failed: {e}")
        raise CREDENTIALS_EXCEPTION
    uid = decoded.get("uid")
    if not uid:
        raise CREDENTIALS_EXCEPTION

    # 3) Fetch the Firestore user profile
    try:
        snapshot = get_firestore_client().collection("users").document(uid).get()
    except Exception as e:
        logger.error(f"Firestore error fetching profile for {uid}: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not fetch user profile.",
        )
    if not snapshot.exists:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User profile not found in Firestore",
        )
    profile = snapshot.to_dict()

    return {
        "id": uid,
        "name": profile.get("displayName") or decoded.get("name", ""),
        "email": profile.get("email") or decoded.get("email", ""),
        "role": profile.get("role", "worker"),
    }


# Manager Role Check Dependency
async def require_manager_role(
    current_user: Annotated[dict, Depends(get_current_user)]
):
    # Check That User Has Adequate Permissions
    if current_user.get("role") not in MANAGER_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User doesn't have sufficient privileges for this action",
        )

    # Passes Check Endpoint
    return current_user
