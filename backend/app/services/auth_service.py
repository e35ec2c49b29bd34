import logging
from typing import Optional, Tuple
from email_validator import EmailNotValidError, validate_email
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from app.core.errors import AuthError, ConflictError, NotFoundError, ServerError, ValidationError
from app.core.security import create_access_token, get_password_hash, verify_password
from app.models.user import Role, User

logger = logging.getLogger(__name__)

# Same message for unknown email and wrong password so registered emails can't be probed
INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
EMAIL_IN_USE_MESSAGE = "Email already in use"


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def normalize_email(email: str) -> str:
    """
    Canonical form used for storage and lookup.

    Matches what pydantic's EmailStr produces (domain lowercased), so an
    address typed the same way at register and login always resolves.
    Unparseable input is only stripped; it simply matches no account.
    """
    email = email.strip()
    try:
        return validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError:
        return email


class AuthService:
    @staticmethod
    def issue_token(user: User) -> str:
        """Session token carrying the user id (``sub``) and role"""
        return create_access_token({"sub": user.id, "role": Role(user.role).value})

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email).first()

    @staticmethod
    def register(
        db: Session,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
        role: Optional[Role] = None,
        whatsapp_number: Optional[str] = None,
    ) -> Tuple[str, User]:
        """Create a user and return (token, user)"""
        if _blank(name) or _blank(email) or not password:
            raise ValidationError("Please provide all required fields")

        role = role or Role.CLIENT
        if role is Role.VENDOR and _blank(whatsapp_number):
            raise ValidationError("Vendors must provide a WhatsApp number", field="whatsappNumber")

        email = normalize_email(email)
        try:
            if AuthService.get_user_by_email(db, email):
                logger.info(f"Registration rejected, email already in use: {email}")
                raise ConflictError(EMAIL_IN_USE_MESSAGE, field="email")

            user = User(
                name=name.strip(),
                email=email,
                hashed_password=get_password_hash(password),
                role=role,
                whatsapp_number=whatsapp_number.strip() if role is Role.VENDOR else None,
            )
            db.add(user)
            db.commit()
            db.refresh(user)
        except IntegrityError:
            # Two registrations raced past the lookup; the unique index caught the second
            db.rollback()
            raise ConflictError(EMAIL_IN_USE_MESSAGE, field="email")
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Registration failed")
            raise ServerError("Server error during registration")

        logger.info(f"Registered user {user.id} ({user.email}) as {role.value}")
        return AuthService.issue_token(user), user

    @staticmethod
    def login(db: Session, email: Optional[str], password: Optional[str]) -> Tuple[str, User]:
        """Authenticate by email/password and return (token, user)"""
        if _blank(email) or not password:
            raise ValidationError("Please provide email and password")

        try:
            user = AuthService.get_user_by_email(db, normalize_email(email))
        except SQLAlchemyError:
            logger.exception("Login lookup failed")
            raise ServerError("Server error during login")

        if not user or not verify_password(password, user.hashed_password):
            logger.info("Login failed: invalid credentials")
            raise AuthError(INVALID_CREDENTIALS_MESSAGE)

        logger.info(f"User {user.id} logged in")
        return AuthService.issue_token(user), user

    @staticmethod
    def get_user(db: Session, user_id: str) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if user is None:
            raise NotFoundError("User not found")
        return user


auth_service = AuthService()
