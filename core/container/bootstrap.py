import logging
from typing import Any, Optional

from config.configuration_manager import create_configuration_manager, ConfigurationManager
from services.configuration_change_recorder import ConfigurationChangeRecorder
from services.configuration_service import ConfigurationService
from services.environment_service import EnvironmentService
from services.write_section import WriteSection

logger = logging.getLogger(__name__)


async def configure(
    services: Any, app: Any, config: Optional[ConfigurationManager] = None
) -> None:
    """Centralize runtime service registration.

    Registers the configuration store and its collaborators in the
    `ProductionServiceContainer` so routes only depend on the container as
    the single source of truth.
    """

    # Configuration manager, doubling as the live settings view
    cfg: ConfigurationManager = config or create_configuration_manager()
    await services.register_instance(
        ConfigurationManager,
        cfg,
        aliases=["config_manager", "configuration_manager", "config"],
    )
    logger.info("Registered ConfigurationManager (env=%s)", cfg.get_str("env"))
    logger.debug("Settings options: %s", cfg.get_section("settings"))

    # Environment gate
    environment = EnvironmentService(cfg)
    await services.register_instance(
        EnvironmentService,
        environment,
        aliases=["environment_service", "environment"],
    )
    settings_path = environment.resolve_settings_file_path()
    cfg.attach_settings_file(settings_path)
    logger.info(
        "Registered EnvironmentService (allowed=%s, settings=%s)",
        environment.is_allowed_environment(),
        settings_path,
    )

    # Single writer section shared by every write
    await services.register_instance(
        WriteSection,
        WriteSection(timeout_seconds=cfg.get_float("settings.write_timeout_seconds", 0.0)),
        aliases=["write_section"],
    )

    # Audit trail
    await services.register_instance(
        ConfigurationChangeRecorder,
        ConfigurationChangeRecorder(log_file=cfg.get_str("settings.change_log_file")),
        aliases=["change_recorder"],
    )

    # Configuration store
    await services.register_service(
        ConfigurationService,
        ConfigurationService,
        singleton=True,
        dependencies=[
            EnvironmentService,
            WriteSection,
            ConfigurationChangeRecorder,
            ConfigurationManager,
        ],
        aliases=["configuration_service"],
    )
    logger.info("Registered ConfigurationService")

    app.state.settings_file = str(settings_path)
    logger.debug("Service container bootstrap finished")
