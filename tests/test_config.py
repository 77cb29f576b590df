import pytest

from wallbounce.config import (
    DEFAULT_CATALOG,
    Config,
    ModelConfig,
    create_sample_config,
    get_config_path,
    load_config,
    parse_config,
    save_config,
)
from wallbounce.errors import ConfigError


def test_defaults_without_file(tmp_path):
    config = load_config(tmp_path / "missing")
    assert config.catalog() == list(DEFAULT_CATALOG)
    assert config.default_models == ["gpt-5", "gemini-2.5-pro", "o3-mini"]
    assert config.deadline_ms == 60000
    assert config.get_bound_models() == []


def test_parse_config_reads_models_and_limits():
    config = parse_config({
        "default_models": ["gpt-5", "o3-mini"],
        "call_timeout_ms": 1500,
        "deadline_ms": 0,
        "max_context_chars": 4000,
        "synthesis": "digest",
        "models": {
            "gpt-5": {"api_key": "sk-1", "base_url": "https://api.openai.com/v1"},
            "o3-mini": None,
        },
    })

    assert config.catalog() == ["gpt-5", "o3-mini"]
    assert config.default_models == ["gpt-5", "o3-mini"]
    assert config.call_timeout_ms == 1500
    assert config.deadline_ms is None
    assert config.max_context_chars == 4000
    assert config.synthesis == "digest"
    assert config.get_bound_models() == ["gpt-5"]
    assert config.get_model_config("o3-mini").model_name == "o3-mini"


def test_api_key_env_is_resolved(monkeypatch):
    monkeypatch.setenv("WB_GEMINI_KEY", "g-key")
    model = ModelConfig(identifier="gemini-2.5-pro", api_key_env="WB_GEMINI_KEY", base_url="https://g/")
    assert model.resolved_api_key() == "g-key"
    assert model.is_bound()


def test_invalid_yaml_is_a_config_error(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("models: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_non_mapping_top_level_is_a_config_error(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_save_then_load_keeps_settings(tmp_path):
    path = tmp_path / "wallbounce.yaml"
    config = Config(
        models={"gpt-5": ModelConfig(identifier="gpt-5", api_key="sk", base_url="https://x/v1", max_retries=2)},
        default_models=["gpt-5"],
        use_session_memory=True,
        deadline_ms=None,
    )
    save_config(config, path)
    loaded = load_config(path)

    assert loaded.models["gpt-5"].max_retries == 2
    assert loaded.models["gpt-5"].base_url == "https://x/v1"
    assert loaded.use_session_memory is True
    assert loaded.deadline_ms is None


def test_sample_config_parses(tmp_path, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    path = create_sample_config(tmp_path / "sample.yaml")
    config = load_config(path)

    assert set(config.catalog()) == set(DEFAULT_CATALOG)
    assert "gemini-2.5-pro" not in config.get_bound_models()
    assert "gpt-5" in config.get_bound_models()


def test_config_path_honours_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("WALLBOUNCE_CONFIG", str(tmp_path / "custom.yaml"))
    assert get_config_path() == tmp_path / "custom.yaml"


def test_temperature_and_max_tokens_are_unset_by_default(tmp_path):
    assert Config().temperature is None
    assert parse_config({}).temperature is None
    assert parse_config({"temperature": 0.3, "max_tokens": "512"}).max_tokens == 512

    path = tmp_path / "wallbounce.yaml"
    save_config(Config(), path)
    assert "temperature" not in path.read_text(encoding="utf-8")
    assert load_config(create_sample_config(tmp_path / "sample.yaml")).temperature is None
