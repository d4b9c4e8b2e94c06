from datetime import datetime

from fastapi import APIRouter, Depends
from sqlmodel import Session

from pantry.database import get_session
from pantry.models.user import User
from pantry.schemas.user_schemas import ProfileUpdate, UserRead
from pantry.utils.token import get_current_user

router = APIRouter()


@router.put("")
def update_profile(
    data: ProfileUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    # balance is never writable from here
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(current_user, field, value)
    current_user.updated_at = datetime.utcnow()

    session.add(current_user)
    session.commit()
    session.refresh(current_user)

    return UserRead.model_validate(current_user)
