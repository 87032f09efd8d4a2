import functools

from flask import session
from loguru import logger
from sqlalchemy.exc import IntegrityError

from errors import AuthRequired, EmailAlreadyRegistered, InvalidCredentials, InvalidPayload, PasswordTooShort
from models import User, db
from store import guarded, store_available

MIN_PASSWORD_LENGTH = 6


def normalize_email(email):
    return (email or "").strip().lower()


@guarded
def register_user(email, password, name, company=""):
    email = normalize_email(email)
    name = (name or "").strip()
    password = password or ""

    if not email or not password or not name:
        raise InvalidPayload("Email, password and name are required")
    if "@" not in email:
        raise InvalidPayload("Invalid email address")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordTooShort()
    if User.query.filter_by(email=email).first():
        raise EmailAlreadyRegistered()

    user = User(email=email, name=name[:100], company=(company or "").strip()[:200])
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise EmailAlreadyRegistered()
    logger.info(f"Registered user {user.id}")
    return user


@guarded
def authenticate(email, password):
    user = User.query.filter_by(email=normalize_email(email)).first()
    if not user or not user.check_password(password or ""):
        logger.info("Failed login attempt")
        raise InvalidCredentials()
    return user


@guarded
def get_user(user_id):
    return db.session.get(User, user_id)


def start_session(user):
    session.clear()
    session.permanent = True
    session['user_id'] = user.id
    session['user_name'] = user.name
    session['user_email'] = user.email


def end_session():
    session.clear()


def current_user():
    user_id = session.get('user_id')
    if user_id is None or not store_available():
        return None
    user = get_user(user_id)
    if user is None:
        # account removed since the session was issued
        session.clear()
    return user


def login_required(view):
    @functools.wraps(view)
    def wrapper(*args, **kwargs):
        user = current_user()
        if user is None:
            raise AuthRequired()
        return view(user, *args, **kwargs)

    return wrapper
