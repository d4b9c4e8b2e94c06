from datetime import datetime
from uuid import uuid4

from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from pantry.config import settings
from pantry.database import get_session
from pantry.models.user import User
from pantry.schemas.user_schemas import SimpleLogin, UserRead
from pantry.utils.token import create_access_token, get_current_user

router = APIRouter()


@router.get("/user")
def get_auth_user(current_user: User = Depends(get_current_user)):
    return UserRead.model_validate(current_user)


# Demo login for local testing; production sessions come from the identity provider
@router.post("/simple-login")
def simple_login(data: SimpleLogin, session: Session = Depends(get_session)):
    email = data.email.lower()
    user = session.exec(select(User).where(User.email == email)).first()

    if not user:
        user = User(
            id=f"demo-user-{uuid4().hex[:12]}",
            email=email,
            first_name="Demo",
            last_name="User",
            balance=settings.demo_starting_balance,
        )
    else:
        user.updated_at = datetime.utcnow()

    session.add(user)
    session.commit()
    session.refresh(user)

    token = create_access_token({"sub": user.id, "email": user.email})

    return {
        "success": True,
        "access_token": token,
        "token_type": "bearer",
        "user": UserRead.model_validate(user),
    }
