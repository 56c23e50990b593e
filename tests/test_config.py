"""
Tests for configuration loading.
"""

import os
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from case_intake.config import AnalysisDepth, IntakeSettings, PolicyConfig

INTAKE_VARS = ("INTAKE_ANALYSIS_DEPTH", "INTAKE_COUNTRY", "INTAKE_USE_LLM", "INTAKE_FOLLOW_UP_CAP")


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in INTAKE_VARS:
        monkeypatch.delenv(name, raising=False)
    yield tmp_path / "missing.env"
    # .env loading writes straight to os.environ
    for name in INTAKE_VARS:
        os.environ.pop(name, None)


class TestAnalysisDepth:

    def test_from_string(self):
        assert AnalysisDepth.from_string("quick") == AnalysisDepth.QUICK
        assert AnalysisDepth.from_string(" Thorough ") == AnalysisDepth.THOROUGH
        assert AnalysisDepth.from_string(AnalysisDepth.STANDARD) == AnalysisDepth.STANDARD

    def test_unknown_depth(self):
        with pytest.raises(ValueError):
            AnalysisDepth.from_string("exhaustive")
        assert AnalysisDepth.from_string("exhaustive", default=AnalysisDepth.QUICK) == AnalysisDepth.QUICK

    def test_missing_depth(self):
        with pytest.raises(ValueError):
            AnalysisDepth.from_string("")
        assert AnalysisDepth.from_string(None, default=AnalysisDepth.STANDARD) == AnalysisDepth.STANDARD


class TestIntakeSettings:

    def test_defaults(self, clean_env):
        settings = IntakeSettings.from_env(clean_env)
        assert settings.depth == AnalysisDepth.STANDARD
        assert settings.country == ""
        assert settings.use_llm is False
        assert settings.policy == PolicyConfig()

    def test_environment(self, clean_env, monkeypatch):
        monkeypatch.setenv("INTAKE_ANALYSIS_DEPTH", "quick")
        monkeypatch.setenv("INTAKE_COUNTRY", " Sweden ")
        monkeypatch.setenv("INTAKE_USE_LLM", "true")
        monkeypatch.setenv("INTAKE_FOLLOW_UP_CAP", "3")

        settings = IntakeSettings.from_env(clean_env)

        assert settings.depth == AnalysisDepth.QUICK
        assert settings.country == "Sweden"
        assert settings.use_llm is True
        assert settings.policy.follow_up_cap == 3

    def test_unknown_depth_falls_back_to_standard(self, clean_env, monkeypatch):
        monkeypatch.setenv("INTAKE_ANALYSIS_DEPTH", "exhaustive")
        assert IntakeSettings.from_env(clean_env).depth == AnalysisDepth.STANDARD

    def test_invalid_cap(self, clean_env, monkeypatch):
        monkeypatch.setenv("INTAKE_FOLLOW_UP_CAP", "two")
        with pytest.raises(ValueError, match="INTAKE_FOLLOW_UP_CAP"):
            IntakeSettings.from_env(clean_env)

    def test_negative_cap(self, clean_env, monkeypatch):
        monkeypatch.setenv("INTAKE_FOLLOW_UP_CAP", "-1")
        with pytest.raises(ValueError):
            IntakeSettings.from_env(clean_env)

    def test_dotenv_file(self, clean_env, monkeypatch, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("# local settings\nINTAKE_COUNTRY=Norway\nINTAKE_ANALYSIS_DEPTH=thorough\n")
        monkeypatch.setenv("INTAKE_ANALYSIS_DEPTH", "quick")

        settings = IntakeSettings.from_env(env_file)

        assert settings.country == "Norway"
        # The environment wins over the file
        assert settings.depth == AnalysisDepth.QUICK
