class Constants:
    """Constants used by the configuration service and its collaborators.

    Includes default values, environment variable keys and the fixed
    path policy sets consulted before every read and write.
    """

    # App
    APP_NAME: str = "Dynamic Settings"
    DEFAULT_ENV: str = "production"
    ENV_KEY: str = "ENV"

    # Security
    API_KEY_NAME: str = "API_KEY"

    # Environment gate
    ALLOWED_ENVIRONMENTS_KEY: str = "ALLOWED_ENVIRONMENTS"
    DEFAULT_ALLOWED_ENVIRONMENTS: tuple = ("development", "test")

    # Settings document
    CONTENT_ROOT_KEY: str = "CONTENT_ROOT"
    SETTINGS_FILE_KEY: str = "SETTINGS_FILE"
    DEFAULT_SETTINGS_FILE: str = "appsettings.Development.json"
    PATH_SEPARATOR: str = ":"

    # Write section
    WRITE_TIMEOUT_KEY: str = "CONFIG_WRITE_TIMEOUT_SECONDS"
    DEFAULT_WRITE_TIMEOUT_SECONDS: float = 0.0

    # Change log
    CHANGE_LOG_FILE_KEY: str = "CONFIG_CHANGE_LOG"
    CONFIG_CHANGE_LOG_FILE: str = "config-changes.log"

    # Server
    HOST_KEY: str = "HOST"
    PORT_KEY: str = "PORT"
    DEFAULT_HOST: str = "0.0.0.0"
    DEFAULT_PORT: int = 8000

    # Paths that may never be written
    RESTRICTED_PATHS: tuple = (
        "ConnectionStrings",
        "Authentication",
        "Security",
    )

    # Paths that may never be read
    HIDDEN_PATHS: tuple = (
        "Secrets",
        "ConnectionStrings",
        "ApiKeys",
        "Credentials",
        "PrivateKeys",
        "Tokens",
    )
