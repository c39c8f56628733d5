import pytest

from capsweep.infrastructure.config import settings


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "api_key: yaml-key\n"
        "run:\n"
        "  max_retries: 5\n"
        "  profile: fast\n"
        "http:\n"
        "  timeout_seconds: 12.5\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def empty_env_file(tmp_path):
    path = tmp_path / ".env"
    path.write_text("", encoding="utf-8")
    return path


def test_env_var_name():
    assert settings.env_var_name("run.max_retries") == "RUN_MAX_RETRIES"
    assert settings.env_var_name("api_key") == "API_KEY"


def test_yaml_sections_are_flattened(config_file, empty_env_file):
    settings.load_configuration(config_file=config_file, env_file=empty_env_file)

    assert settings.get_api_key() == "yaml-key"
    assert settings.get_max_retries() == 5
    assert settings.get_profile_name() == "fast"
    assert settings.get_http_timeout() == 12.5


def test_environment_overrides_yaml(config_file, empty_env_file, monkeypatch):
    monkeypatch.setenv("RUN_MAX_RETRIES", "1")
    monkeypatch.setenv("API_KEY", "env-key")
    settings.load_configuration(config_file=config_file, env_file=empty_env_file)

    assert settings.get_max_retries() == 1
    assert settings.get_api_key() == "env-key"


def test_dotenv_file_is_loaded(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("BASE_URL=https://sandbox.test\n", encoding="utf-8")
    monkeypatch.setenv("BASE_URL", "placeholder")
    monkeypatch.delenv("BASE_URL")  # unset again at teardown

    settings.load_configuration(config_file=tmp_path / "missing.yaml", env_file=env_file)

    assert settings.get_base_url() == "https://sandbox.test"


def test_defaults_without_any_source(tmp_path, empty_env_file):
    settings.load_configuration(config_file=tmp_path / "missing.yaml", env_file=empty_env_file)

    assert settings.get_api_key() is None
    assert settings.get_base_url() == settings.DEFAULT_BASE_URL
    assert settings.get_max_retries() == settings.DEFAULT_MAX_RETRIES
    assert settings.get_http_timeout() == settings.DEFAULT_HTTP_TIMEOUT
    assert settings.get_profile_name() == "standard"
    assert settings.get_page_size() is None


def test_invalid_values_fall_back(monkeypatch):
    monkeypatch.setenv("RUN_MAX_RETRIES", "many")
    monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "-4")
    monkeypatch.setenv("RUN_PAGE_SIZE", "0")

    assert settings.get_max_retries() == settings.DEFAULT_MAX_RETRIES
    assert settings.get_http_timeout() == settings.DEFAULT_HTTP_TIMEOUT
    assert settings.get_page_size() is None


def test_malformed_yaml_is_ignored(tmp_path, empty_env_file):
    bad = tmp_path / "config.yaml"
    bad.write_text("run: [unclosed\n", encoding="utf-8")

    settings.load_configuration(config_file=bad, env_file=empty_env_file)

    assert settings.get_max_retries() == settings.DEFAULT_MAX_RETRIES


def test_test_config_has_highest_priority(monkeypatch):
    monkeypatch.setenv("API_KEY", "env-key")
    settings.set_config_for_testing({"api_key": "test-key"})

    assert settings.get_api_key() == "test-key"

    settings.clear_test_config()
    assert settings.get_api_key() == "env-key"


def test_env_values_are_coerced(monkeypatch):
    monkeypatch.setenv("SOME_FLAG", "true")
    monkeypatch.setenv("SOME_RATIO", "0.5")
    assert settings.get_config("some.flag") is True
    assert settings.get_config("some.ratio") == 0.5
