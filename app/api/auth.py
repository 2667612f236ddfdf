from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.security import verify_password, create_access_token
from app.db.models.user import User
from app.db.session import get_db
from app.schemas.user import TokenOut, UserLogin

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=TokenOut)
def login(user: UserLogin, db: Session = Depends(get_db)):
    db_user = db.execute(
        select(User).where(User.email == user.email.lower())
    ).scalar_one_or_none()

    if not db_user or not db_user.is_active or not verify_password(user.password, db_user.hashed_password):
        raise HTTPException(status_code=401, detail="Credenziali non valide")

    token = create_access_token({
        "sub": str(db_user.id),
        "role": db_user.role,
        "email": db_user.email,
    })

    return {"access_token": token, "token_type": "bearer"}
