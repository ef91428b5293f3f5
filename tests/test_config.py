import pytest

from signature_sdk import ClientConfig, ConfigurationError, EtagCacheOptions


def test_defaults():
    config = ClientConfig(base_url="https://api.example.com", access_token="token")

    config.validate()

    assert config.timeout == 30.0
    assert config.max_retries == 5
    assert config.enable_etag_cache is False
    assert config.etag_cache_options == EtagCacheOptions(default_ttl=300.0, max_size=500)
    assert config.user_agent == "signature-module-sdk/3.0.1"
    assert config.refresh_path == "/api/v1/auth/refresh"


def test_base_url_is_required():
    with pytest.raises(ConfigurationError, match="base_url is required"):
        ClientConfig(access_token="token").validate()


def test_a_credential_is_required():
    with pytest.raises(ConfigurationError, match="access_token or api_key is required"):
        ClientConfig(base_url="https://api.example.com").validate()


def test_api_key_alone_is_enough():
    ClientConfig(base_url="https://api.example.com", api_key="key").validate()


@pytest.mark.parametrize(
    "options, message",
    [
        ({"timeout": 0}, "timeout must be positive"),
        ({"max_retries": -1}, "max_retries must not be negative"),
        ({"etag_cache_options": EtagCacheOptions(max_size=0)}, "etag_cache_options.max_size must be positive"),
    ],
)
def test_invalid_values(options, message):
    with pytest.raises(ConfigurationError, match=message):
        ClientConfig(base_url="https://api.example.com", access_token="token", **options).validate()


def test_configuration_error_is_a_value_error():
    with pytest.raises(ValueError):
        ClientConfig().validate()


def test_from_env():
    environ = {
        "SIGNATURE_BASE_URL": "https://api.example.com",
        "SIGNATURE_ACCESS_TOKEN": "token",
        "SIGNATURE_REFRESH_TOKEN": "refresh",
        "SIGNATURE_TIMEOUT": "12.5",
        "SIGNATURE_ENABLE_ETAG_CACHE": "true",
        "OTHER_API_KEY": "ignored",
    }

    config = ClientConfig.from_env(environ=environ)

    assert config == ClientConfig(
        base_url="https://api.example.com",
        access_token="token",
        refresh_token="refresh",
        timeout=12.5,
        enable_etag_cache=True,
    )


def test_from_env_prefix_and_overrides():
    environ = {"ACME_BASE_URL": "https://acme.example.com", "ACME_API_KEY": "key"}

    config = ClientConfig.from_env(prefix="ACME_", environ=environ, max_retries=1)

    assert config.base_url == "https://acme.example.com"
    assert config.api_key == "key"
    assert config.max_retries == 1


def test_from_env_reads_os_environ(monkeypatch):
    monkeypatch.setenv("SIGNATURE_BASE_URL", "https://env.example.com")
    monkeypatch.setenv("SIGNATURE_API_KEY", "key")
    monkeypatch.setenv("SIGNATURE_ENABLE_ETAG_CACHE", "0")

    config = ClientConfig.from_env()

    assert config.base_url == "https://env.example.com"
    assert config.enable_etag_cache is False


@pytest.mark.parametrize(
    "variable, value, message",
    [
        ("SIGNATURE_TIMEOUT", "soon", "SIGNATURE_TIMEOUT should be a number"),
        ("SIGNATURE_ENABLE_ETAG_CACHE", "maybe", "SIGNATURE_ENABLE_ETAG_CACHE should be a boolean"),
    ],
)
def test_from_env_invalid_values(variable, value, message):
    with pytest.raises(ConfigurationError, match=message):
        ClientConfig.from_env(environ={variable: value})
