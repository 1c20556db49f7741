import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.db.models.admin_user import AdminUser
from app.core.security import verify_password, create_access_token
from app.schemas.auth import TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/login", response_model=TokenResponse)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    # OAuth2 form sends "username"; admins log in with their email
    email = form_data.username.strip().lower()
    admin = db.query(AdminUser).filter(AdminUser.email == email).first()

    if not admin or not verify_password(form_data.password, admin.password_hash):
        logger.warning(f"Failed admin login for {email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    token = create_access_token({"sub": admin.email})
    logger.info(f"Admin logged in: admin_id={admin.id}")

    return {
        "access_token": token,
        "token_type": "bearer"
    }
