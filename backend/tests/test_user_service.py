import pytest

from docudigitize.api.exceptions import InvalidInputError, NotFoundError
from docudigitize.services.user_service import UserService


@pytest.fixture
def user_service(store):
    return UserService(store)


def test_add_user_trims_name(user_service):
    user, created = user_service.add_user("  Maria ")
    assert user == {"name": "Maria"}
    assert created is True


def test_duplicate_user_returns_existing(user_service):
    user_service.add_user("Maria")
    user, created = user_service.add_user("MARIA")

    assert user == {"name": "Maria"}
    assert created is False
    assert user_service.list_users() == [{"name": "Maria"}]


def test_empty_user_name_is_rejected(user_service):
    with pytest.raises(InvalidInputError):
        user_service.add_user("")


def test_login_registers_new_names(user_service):
    assert user_service.login("Γιώργος") == {"name": "Γιώργος"}
    assert user_service.login("γιώργος") == {"name": "Γιώργος"}
    assert len(user_service.list_users()) == 1


def test_delete_user(user_service):
    user_service.add_user("Maria")

    with pytest.raises(NotFoundError):
        user_service.delete_user("maria")

    user_service.delete_user("Maria")
    assert user_service.list_users() == []
