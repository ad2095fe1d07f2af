from src.store.config import DEFAULT_ALLOWED_ORIGINS, Settings


def test_allowed_origins_from_comma_separated_env(monkeypatch):
    monkeypatch.setenv("ALLOWED_ORIGINS", "https://shop.avecatering.com, https://admin.avecatering.com,")
    monkeypatch.setenv("FRONTEND_URL", "https://www.avecatering.com")

    cfg = Settings()

    assert cfg.ALLOWED_ORIGINS == ["https://shop.avecatering.com", "https://admin.avecatering.com"]
    assert cfg.cors_origins[-1] == "https://www.avecatering.com"


def test_allowed_origins_from_json_list(monkeypatch):
    monkeypatch.setenv("ALLOWED_ORIGINS", '["https://shop.avecatering.com"]')
    assert Settings().ALLOWED_ORIGINS == ["https://shop.avecatering.com"]


def test_allowed_origins_default(monkeypatch):
    monkeypatch.delenv("ALLOWED_ORIGINS", raising=False)
    assert Settings().ALLOWED_ORIGINS == DEFAULT_ALLOWED_ORIGINS
