from cluster_auth.env.env import (
    BOOTSTRAP_MAX_RETRIES,
    DEFAULT_INITIAL_WAIT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MAX_WAIT,
    ConfigError,
    Environment,
    LoggingEnvironment,
    get_env,
    get_logging_env,
    reset_env_caches,
)
from cluster_auth.env.paths import logs_dir, command_logs_dir, env_file

__all__ = [
    "BOOTSTRAP_MAX_RETRIES",
    "DEFAULT_INITIAL_WAIT",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_MAX_WAIT",
    "ConfigError",
    "Environment",
    "LoggingEnvironment",
    "get_env",
    "get_logging_env",
    "reset_env_caches",
    "logs_dir",
    "command_logs_dir",
    "env_file",
]
