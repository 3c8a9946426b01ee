"""Registration, login and role membership over the users/roles tables."""
import logging
import string
from typing import List, Optional

from sqlalchemy.orm import Session

from . import auth, models
from .errors import Conflict, Unauthorized, ValidationError

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials."
USERNAME_CHARACTERS = frozenset(string.ascii_letters + string.digits + "-._@+")


def normalize_email(email: str) -> str:
    return email.strip().upper()


def username_problems(username: str) -> List[str]:
    if set(username) - USERNAME_CHARACTERS:
        return [f"Username '{username}' is invalid, can only contain letters or digits and -._@+."]
    return []


def password_problems(password: str) -> List[str]:
    """Return every password-policy rule ``password`` breaks (empty when acceptable)."""
    problems = []
    if len(password) < 6:
        problems.append("Passwords must be at least 6 characters.")
    if not any(c.isdigit() for c in password):
        problems.append("Passwords must have at least one digit ('0'-'9').")
    if not any(c.islower() for c in password):
        problems.append("Passwords must have at least one lowercase ('a'-'z').")
    if not any(c.isupper() for c in password):
        problems.append("Passwords must have at least one uppercase ('A'-'Z').")
    if all(c.isalnum() for c in password):
        problems.append("Passwords must have at least one non alphanumeric character.")
    return problems


def find_by_email(db: Session, email: str) -> Optional[models.User]:
    return (
        db.query(models.User)
        .filter(models.User.normalized_email == normalize_email(email))
        .first()
    )


def ensure_role(db: Session, name: str) -> models.Role:
    role = db.query(models.Role).filter(models.Role.name == name).first()
    if role is None:
        role = models.Role(name=name)
        db.add(role)
        db.flush()
        logger.info("created role %s", name)
    return role


def create_user(db: Session, email: str, password: str, roles: Optional[List[str]] = None) -> models.User:
    email = (email or "").strip()
    if not email:
        raise ValidationError("Email is required.")
    if find_by_email(db, email) is not None:
        raise Conflict("User already exists.")
    problems = username_problems(email)
    if problems:
        raise ValidationError("Username is invalid.", errors=problems)
    problems = password_problems(password or "")
    if problems:
        raise ValidationError("Password does not meet requirements.", errors=problems)

    user = models.User(
        email=email,
        normalized_email=normalize_email(email),
        username=email,
        password_hash=auth.hash_password(password),
        email_confirmed=True,
    )
    for name in roles or []:
        user.roles.append(ensure_role(db, name))
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("registered user %d", user.id)
    return user


def register(db: Session, email: str, password: str) -> None:
    create_user(db, email, password)


def login(db: Session, email: str, password: str) -> str:
    user = find_by_email(db, email or "")
    if user is None:
        logger.info("login failed: unknown account")
        raise Unauthorized(INVALID_CREDENTIALS)
    if not auth.verify_password(password or "", user.password_hash):
        logger.info("login failed for user %d", user.id)
        raise Unauthorized(INVALID_CREDENTIALS)
    return auth.create_access_token(user.id, user.email, user.username, user.role_names)
