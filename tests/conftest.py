"""
Shared fixtures: an in-memory SQLite store wired into the app through a
get_session override, plus helpers to create users, tokens and products.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.main import app
from app.db.session import get_session
from app.core.security import create_access_token, get_password_hash
from app.models.user import User, UserRole
from app.models.product import Product


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(session):
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    def _make_user(email: str, role: UserRole = UserRole.USER, password: str = "Password123!") -> User:
        user = User(
            email=email,
            first_name=email.split("@")[0].capitalize(),
            password_hash=get_password_hash(password),
            role=role,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def alice(make_user):
    return make_user("alice@example.com")


@pytest.fixture
def bob(make_user):
    return make_user("bob@example.com")


@pytest.fixture
def admin(make_user):
    return make_user("admin@example.com", role=UserRole.ADMIN)


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": user.id, "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def products(session):
    items = [
        Product(name="Ceramic Mug", price=12.5, main_image="/images/mug.webp"),
        Product(name="Notebook A5", price=8.0),
    ]
    for product in items:
        session.add(product)
    session.commit()
    for product in items:
        session.refresh(product)
    return items
