import pytest

from post_mailer import services


SITE_SETTINGS = {
    "title": "Test Site",
    "icon": "https://site.com/icon.png",
    "accent_color": "#000099",
}


@pytest.fixture
def settings(monkeypatch):
    values = dict(SITE_SETTINGS)
    monkeypatch.setattr(services.settings_cache, "get", values.get)
    return values


@pytest.fixture
def site_url(monkeypatch):
    def _stub(url):
        monkeypatch.setattr(services.url_utils, "get_site_url", lambda: url)
    return _stub


@pytest.fixture
def post_url(monkeypatch):
    def _stub(url):
        monkeypatch.setattr(services.url_service, "get_url_by_resource_id", lambda *a, **k: url)
    return _stub


@pytest.fixture
def paywall_enabled(monkeypatch):
    monkeypatch.setattr(services.labs, "is_set", lambda flag: True)
