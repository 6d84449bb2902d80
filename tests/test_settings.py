"""Tests for configuration loading and run entry points."""

from pathlib import Path

import pytest

from conftest import FakeClient, write_csv
from config import settings as settings_module
from config.paths import PATHS
from config.settings import Config, ConfigurationError, RunSettings, _default_config, load_config
from inference.pipeline import RunStatus, default_sentiment_config, default_vision_config, run_sentiment, run_vision

ENV = {
    "DATA_PATH": "",
    "CHAT_API_OLLAMA_URL": "http://localhost:11434/api/",
    "CHAT_API_OLLAMA_MODEL_TEXT": "llama3",
    "CHAT_API_OLLAMA_MODEL_VISION": "llava",
}


@pytest.fixture
def env(monkeypatch, tmp_path):
    monkeypatch.setattr(settings_module, "load_dotenv", lambda *args, **kwargs: False)
    for key, value in ENV.items():
        monkeypatch.setenv(key, value)
    monkeypatch.setenv("DATA_PATH", str(tmp_path / "data"))
    monkeypatch.delenv("OUTPUT_FILE_NAME", raising=False)
    return monkeypatch


class TestLoadConfig:
    """Tests for load_config and RunSettings."""

    def test_environment_overrides_defaults(self, env, tmp_path):
        """Environment variables land in the matching config sections."""
        config = load_config()

        assert config.api("ollama")["base_url"] == "http://localhost:11434/api/"
        assert config.model("text") == "llama3"
        assert config.model("vision") == "llava"
        assert config.runtime("data_path") == str(tmp_path / "data")

    def test_run_settings_normalise_values(self, env, tmp_path):
        """The base URL loses its trailing slash and the output name defaults."""
        settings = RunSettings.from_config(load_config())

        assert settings.inference_base_url == "http://localhost:11434/api"
        assert settings.data_path == tmp_path / "data"
        assert settings.output_file_name == "output.json"

    def test_output_file_name_override(self, env):
        """OUTPUT_FILE_NAME replaces the sentiment output name."""
        env.setenv("OUTPUT_FILE_NAME", "sentiments.json")

        assert RunSettings.from_config(load_config()).output_file_name == "sentiments.json"

    def test_relative_data_path_is_resolved_from_root(self):
        """Relative DATA_PATH values hang off the project root."""
        config = Config(_default_config())
        config.data["runtime"]["data_path"] = "data"

        assert RunSettings.from_config(config).data_path == PATHS.root / "data"

    def test_require_names_missing_variables(self):
        """Validation lists every unset variable."""
        settings = RunSettings.from_config(Config(_default_config()))

        with pytest.raises(ConfigurationError) as excinfo:
            settings.require("data_path", "inference_base_url", "text_model")

        message = str(excinfo.value)
        assert "DATA_PATH" in message
        assert "CHAT_API_OLLAMA_URL" in message
        assert "CHAT_API_OLLAMA_MODEL_TEXT" in message

    def test_get_walks_dotted_paths(self):
        """Config.get returns nested values or the default."""
        config = Config(_default_config())

        assert config.get("pipelines.sentiment.max_games") == 2
        assert config.get("pipelines.vision.nope", "fallback") == "fallback"


class TestDefaultConfigs:
    """Tests for the per-pipeline config builders."""

    def test_sentiment_paths(self, env, tmp_path):
        """Sentiment inputs live under DATA_PATH/steamreviews."""
        config = default_sentiment_config(load_config())

        assert config.games_path == tmp_path / "data" / "steamreviews" / "games.csv"
        assert config.reviews_path == tmp_path / "data" / "steamreviews" / "reviews.csv"
        assert config.output_path == tmp_path / "data" / "output.json"
        assert (config.max_games, config.max_reviews_per_game) == (2, 2)
        assert "{text}" in config.prompt_template

    def test_vision_paths(self, env, tmp_path):
        """Vision inputs live under DATA_PATH/imatges/animals."""
        config = default_vision_config(load_config())

        assert config.image_dir == tmp_path / "data" / "imatges" / "animals"
        assert config.output_path == PATHS.data_dir / "exercici3_resposta.json"
        assert config.prompt == "Identifica qué tipo de animal aparece en la imagen"
        assert config.model == "llava"
        assert config.max_categories == 1

    def test_vision_requires_vision_model(self, env):
        """A missing vision model is reported by name."""
        env.delenv("CHAT_API_OLLAMA_MODEL_VISION")

        with pytest.raises(ConfigurationError, match="CHAT_API_OLLAMA_MODEL_VISION"):
            default_vision_config(load_config())


class TestRunFunctions:
    """Tests for run_sentiment / run_vision outcomes."""

    def test_missing_settings_give_configuration_outcome(self, env):
        """Configuration errors are returned, not raised."""
        env.delenv("CHAT_API_OLLAMA_URL")

        outcome = run_sentiment(client=FakeClient(), config=load_config())

        assert outcome.status == RunStatus.CONFIGURATION_ERROR
        assert outcome.exit_code == 1
        assert "CHAT_API_OLLAMA_URL" in outcome.message

    def test_missing_csv_gives_configuration_outcome(self, env, tmp_path):
        """Missing input files are a configuration error."""
        outcome = run_sentiment(client=FakeClient(), config=load_config(), log_dir=tmp_path / "logs")

        assert outcome.status == RunStatus.CONFIGURATION_ERROR

    def test_run_sentiment_with_overrides(self, env, tmp_path):
        """Keyword overrides replace fields of the default config."""
        base = tmp_path / "data" / "steamreviews"
        write_csv(base / "games.csv", ["appid", "name"], [["1", "A"], ["2", "B"], ["3", "C"]])
        write_csv(base / "reviews.csv", ["app_id", "content"], [["3", "good"]])
        client = FakeClient()

        outcome = run_sentiment(
            client=client,
            config=load_config(),
            max_games=None,
            log_dir=tmp_path / "logs",
        )

        assert outcome.status == RunStatus.SUCCESS
        assert outcome.output_path == tmp_path / "data" / "output.json"
        assert len(client.requests) == 1

    def test_run_vision_end_to_end(self, env, tmp_path):
        """run_vision writes the report where it is told to."""
        category = tmp_path / "data" / "imatges" / "animals" / "cats"
        category.mkdir(parents=True)
        (category / "cat.gif").write_bytes(b"GIF89a")
        output = tmp_path / "out.json"

        outcome = run_vision(
            client=FakeClient(default="A cat"),
            config=load_config(),
            output_path=output,
            log_dir=tmp_path / "logs",
        )

        assert outcome.status == RunStatus.SUCCESS
        assert Path(outcome.output_path) == output
        assert output.exists()
