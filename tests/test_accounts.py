import pytest

from app.core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from app.core.security import decode_access_token, decode_refresh_token
from app.enums.user_roles import UserRole
from app.schemas.category import CategoryCreate
from app.schemas.user import RegisterRequest
from app.services import auth_service
from app.services.category_service import create_category, list_categories, rename_category


def _company_request(**overrides):
    data = {
        "user_type": UserRole.company,
        "email": "Buyer@Acme.example.com",
        "password": "s3cret-pass",
        "name": "Acme Supplies",
    }
    data.update(overrides)
    return RegisterRequest(**data)


@pytest.mark.order(1)
def test_register_company(identity_db):
    user = auth_service.register(identity_db, _company_request())

    assert user.email == "buyer@acme.example.com"
    assert user.role == "company"
    assert user.company.name == "Acme Supplies"
    response = auth_service.to_response(user)
    assert response.profile_id == user.company.id
    assert response.display_name == "Acme Supplies"


def test_register_retailer_requires_profile(identity_db):
    with pytest.raises(ValidationError):
        auth_service.register(
            identity_db,
            RegisterRequest(user_type=UserRole.retailer, email="shop@example.com", password="password1"),
        )


def test_duplicate_email_conflicts(identity_db):
    auth_service.register(identity_db, _company_request())
    with pytest.raises(ConflictError):
        auth_service.register(identity_db, _company_request(email="buyer@acme.example.com"))


def test_login_and_refresh(identity_db):
    user = auth_service.register(identity_db, _company_request())

    tokens = auth_service.login(identity_db, "buyer@acme.example.com", "s3cret-pass")
    assert decode_access_token(tokens.access_token).user_id == user.id
    assert decode_refresh_token(tokens.refresh_token).user_id == user.id

    refreshed = auth_service.refresh(identity_db, tokens.refresh_token)
    assert decode_access_token(refreshed.access_token).user_id == user.id


def test_access_token_is_not_a_refresh_token(identity_db):
    auth_service.register(identity_db, _company_request())
    tokens = auth_service.login(identity_db, "buyer@acme.example.com", "s3cret-pass")

    with pytest.raises(AuthenticationError):
        auth_service.refresh(identity_db, tokens.access_token)


def test_login_wrong_password(identity_db):
    auth_service.register(identity_db, _company_request())
    with pytest.raises(AuthenticationError):
        auth_service.login(identity_db, "buyer@acme.example.com", "wrong-pass")


# ---------- categories ----------

def test_category_tree(identity_db):
    tools = create_category(identity_db, CategoryCreate(name="Hand Tools", icon="hammer"))
    create_category(identity_db, CategoryCreate(name="Saws", parent_id=tools.id))

    assert tools.slug == "hand-tools"
    assert [c.name for c in list_categories(identity_db, "root")] == ["Hand Tools"]
    assert [c.name for c in list_categories(identity_db, tools.id)] == ["Saws"]


def test_duplicate_category_name(identity_db):
    create_category(identity_db, CategoryCreate(name="Paint"))
    with pytest.raises(ConflictError):
        create_category(identity_db, CategoryCreate(name="Paint"))


def test_unknown_parent_category(identity_db):
    with pytest.raises(NotFoundError):
        create_category(identity_db, CategoryCreate(name="Orphan", parent_id="missing"))


def test_rename_category(identity_db):
    category = create_category(identity_db, CategoryCreate(name="Lighting"))
    renamed = rename_category(identity_db, category.id, "Indoor Lighting")

    assert renamed.name == "Indoor Lighting"
    assert renamed.slug == "indoor-lighting"
