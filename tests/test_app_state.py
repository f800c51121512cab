from datetime import date

from catering_aja.storefront import (
    ApiError,
    AreaDateState,
    AuthState,
    CartStore,
    MemoryStorage,
    SettingsState,
    StorefrontApiClient,
)
from conftest import FlaskTestSession


class DownApi:
    def me(self):
        raise ApiError(401, "Not authenticated")

    def logout(self):
        raise ApiError(0, "connection refused")

    def get_settings(self):
        raise ApiError(500, "Internal server error")


def test_area_and_date_are_persisted():
    storage = MemoryStorage()
    state = AreaDateState(storage, today=date(2024, 7, 1))
    assert state.selected_area == ""
    assert state.selected_date == date(2024, 7, 1)

    state.set_area("depok")
    state.set_date("2024-07-05T00:00:00")

    again = AreaDateState(storage, today=date(2024, 7, 1))
    assert again.selected_area == "depok"
    assert again.selected_date == date(2024, 7, 5)

    again.set_area(None)
    assert storage.get_item("selectedArea") is None


def test_garbage_date_falls_back_to_today():
    state = AreaDateState(MemoryStorage({"selectedDate": "tomorrow-ish"}), today=date(2024, 7, 1))
    assert state.selected_date == date(2024, 7, 1)


def test_logout_clears_cart_even_when_api_fails():
    cart = CartStore(MemoryStorage())
    cart.add_item(product_id=1, name="Gen-Z", price=25000, quantity=1)
    auth = AuthState(DownApi(), cart)
    auth.user = {"id": 2, "role": "customer"}

    auth.logout()
    assert auth.user is None
    assert cart.is_empty()


def test_check_auth_without_session():
    auth = AuthState(DownApi(), CartStore(MemoryStorage()))
    assert auth.check_auth() is None
    assert not auth.is_authenticated


def test_settings_fall_back_to_defaults():
    settings = SettingsState(DownApi()).load()
    assert settings["siteName"] == "Catering Aja"
    assert settings["title"] == "Catering Aja - Solusi Katering Anda"


def test_auth_flow_against_api(client):
    api = StorefrontApiClient("http://catering.test/", session=FlaskTestSession(client))
    cart = CartStore(MemoryStorage())
    auth = AuthState(api, cart)

    auth.register("dewi", "pw", "Dewi")
    auth.login("dewi", "pw")
    assert auth.check_auth()["username"] == "dewi"
    assert not auth.is_admin

    settings = SettingsState(api).load()
    assert settings["siteName"] == "CateringAja"

    auth.logout()
    assert auth.check_auth() is None


def test_api_error_carries_server_message(client):
    api = StorefrontApiClient("http://catering.test", session=FlaskTestSession(client))
    try:
        api.login("admin", "wrong")
    except ApiError as exc:
        assert exc.status_code == 401
        assert exc.message == "Invalid credentials"
    else:
        raise AssertionError("login should fail")
