from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from app.core.database import get_db
from app.core.permissions import Principal
from app.models.user import Role
from app.services.auth_service import auth_service
from app.api.dependencies import get_current_principal

router = APIRouter(prefix="/auth", tags=["auth"])


class UserCreate(BaseModel):
    # Fields are optional here so missing values get the service's error message
    name: str | None = None
    email: EmailStr | None = None
    password: str | None = None
    role: Role | None = None
    whatsapp_number: str | None = Field(default=None, alias="whatsappNumber")

    model_config = ConfigDict(populate_by_name=True)


class UserLogin(BaseModel):
    email: str | None = None
    password: str | None = None


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: Role

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    token: str
    user: UserResponse


class RegisterResponse(AuthResponse):
    message: str


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(user_data: UserCreate, db: Session = Depends(get_db)):
    """Register a new user and sign them in"""
    token, user = auth_service.register(
        db,
        name=user_data.name,
        email=user_data.email,
        password=user_data.password,
        role=user_data.role,
        whatsapp_number=user_data.whatsapp_number,
    )
    return {
        "message": "User registered successfully",
        "token": token,
        "user": user,
    }


@router.post("/login", response_model=AuthResponse)
async def login(credentials: UserLogin, db: Session = Depends(get_db)):
    """Login and get a session token"""
    token, user = auth_service.login(db, credentials.email, credentials.password)
    return {"token": token, "user": user}


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """Get the account behind the current token"""
    return auth_service.get_user(db, principal.user_id)
