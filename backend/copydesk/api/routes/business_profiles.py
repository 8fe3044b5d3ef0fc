import logging
import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from copydesk import crud
from copydesk.api.deps import CurrentUser, get_db
from copydesk.models import (
    BusinessProfile,
    BusinessProfileCreate,
    BusinessProfilePublic,
    BusinessProfileUpdate,
    Message,
    User,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def get_owned_profile(session: Session, id: uuid.UUID, current_user: User) -> BusinessProfile:
    profile = crud.get_business_profile(session=session, profile_id=id)
    if not profile:
        raise HTTPException(status_code=404, detail="Business profile not found")
    if profile.owner_id != current_user.id:
        raise HTTPException(status_code=403, detail="Not enough permissions")
    return profile


@router.get("/", response_model=list[BusinessProfilePublic])
def read_business_profiles(
    *,
    session: Session = Depends(get_db),
    current_user: CurrentUser,
) -> Any:
    """
    Retrieve the current user's business profiles, newest first.
    """
    return crud.get_user_business_profiles(session=session, owner_id=current_user.id)


@router.post("/", response_model=BusinessProfilePublic)
def create_business_profile(
    *,
    session: Session = Depends(get_db),
    current_user: CurrentUser,
    profile_in: BusinessProfileCreate,
) -> Any:
    """
    Create a business profile. A user's first profile becomes their default.
    """
    profile = crud.create_business_profile(
        session=session, profile_in=profile_in, owner_id=current_user.id
    )
    logger.info("Created business profile %s for user %s", profile.id, current_user.id)
    return profile


@router.get("/default", response_model=BusinessProfilePublic | None)
def read_default_business_profile(
    *,
    session: Session = Depends(get_db),
    current_user: CurrentUser,
) -> Any:
    return crud.get_default_business_profile(session=session, owner_id=current_user.id)


@router.get("/{id}", response_model=BusinessProfilePublic)
def read_business_profile(
    id: uuid.UUID,
    *,
    session: Session = Depends(get_db),
    current_user: CurrentUser,
) -> Any:
    return get_owned_profile(session, id, current_user)


@router.patch("/{id}", response_model=BusinessProfilePublic)
def update_business_profile(
    id: uuid.UUID,
    *,
    session: Session = Depends(get_db),
    current_user: CurrentUser,
    profile_in: BusinessProfileUpdate,
) -> Any:
    profile = get_owned_profile(session, id, current_user)
    return crud.update_business_profile(session=session, db_profile=profile, profile_in=profile_in)


@router.post("/{id}/default", response_model=BusinessProfilePublic)
def set_default_business_profile(
    id: uuid.UUID,
    *,
    session: Session = Depends(get_db),
    current_user: CurrentUser,
) -> Any:
    """
    Make this profile the user's only default profile.
    """
    profile = get_owned_profile(session, id, current_user)
    return crud.set_default_business_profile(session=session, db_profile=profile)


@router.delete("/{id}", response_model=Message)
def delete_business_profile(
    id: uuid.UUID,
    *,
    session: Session = Depends(get_db),
    current_user: CurrentUser,
) -> Any:
    """
    Delete a profile. Deleting the default promotes another remaining profile.
    """
    profile = get_owned_profile(session, id, current_user)
    new_default = crud.delete_business_profile(session=session, db_profile=profile)
    if new_default:
        logger.info("Profile %s is now the default for user %s", new_default.id, current_user.id)
    return Message(message="Business profile deleted successfully")
