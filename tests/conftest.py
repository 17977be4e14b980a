"""
Pytest configuration for Dynamic Settings tests.
"""

import sys
from pathlib import Path  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

# Ensure the project root is in sys.path so we can import modules directly
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import Start  # noqa: E402
from config.configuration_manager import ConfigurationManager  # noqa: E402
from services.configuration_change_recorder import ConfigurationChangeRecorder  # noqa: E402
from services.configuration_service import ConfigurationService  # noqa: E402
from services.environment_service import EnvironmentService  # noqa: E402
from services.write_section import WriteSection  # noqa: E402

SETTINGS_FILE_NAME = "appsettings.Development.json"

# Kept as raw text so number literals such as 1.50 survive.
SAMPLE_SETTINGS_JSON = """{
  "Logging": {
    "LogLevel": {
      "Default": "Warning",
      "Microsoft": "Error"
    }
  },
  "FeatureFlags": {
    "EnableCache": true,
    "UseBeta": false,
    "MaxItems": 25,
    "Ratio": 1.50,
    "Optional": null,
    "Empty": ""
  },
  "AllowedHosts": ["localhost", "example.com"],
  "ConnectionStrings": {
    "Db": "Server=.;Database=app"
  },
  "Secrets": {
    "Key": "s3cr3t"
  },
  "ApiKeysBackup": {
    "Primary": "k-1"
  },
  "Security": {
    "RequireHttps": true
  },
  "Authentication": {
    "Scheme": "Bearer"
  },
  "Security2": {
    "Foo": "bar"
  }
}
"""

_ENV_VARS = (
    "ENV",
    "ALLOWED_ENVIRONMENTS",
    "CONTENT_ROOT",
    "SETTINGS_FILE",
    "CONFIG_CHANGE_LOG",
    "CONFIG_WRITE_TIMEOUT_SECONDS",
    "API_KEY",
)


@pytest.fixture()
def isolated_env(tmp_path, monkeypatch) -> Path:
    """Empty working directory with no settings-related environment variables."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture()
def settings_path(isolated_env: Path) -> Path:
    path = isolated_env / SETTINGS_FILE_NAME
    path.write_text(SAMPLE_SETTINGS_JSON, encoding="utf-8")
    return path


@pytest.fixture()
def config_manager(settings_path: Path) -> ConfigurationManager:
    cfg = ConfigurationManager(
        initial={
            "env": "development",
            "settings.content_root": str(settings_path.parent),
            "settings.file_name": SETTINGS_FILE_NAME,
        }
    )
    cfg.attach_settings_file(settings_path)
    return cfg


@pytest.fixture()
def change_log_path(isolated_env: Path) -> Path:
    return isolated_env / "config-changes.log"


@pytest.fixture()
def configuration_service(config_manager: ConfigurationManager) -> ConfigurationService:
    return ConfigurationService(
        EnvironmentService(config_manager),
        WriteSection(),
        ConfigurationChangeRecorder(),
        config_manager,
    )


@pytest.fixture()
def client(settings_path: Path, monkeypatch):
    """TestClient over the full app with an isolated settings document."""
    monkeypatch.setenv("ENV", "development")
    monkeypatch.setenv("CONTENT_ROOT", str(settings_path.parent))
    monkeypatch.setattr(Start, "API_KEY_ENV", "")
    with TestClient(Start.app) as test_client:
        yield test_client
