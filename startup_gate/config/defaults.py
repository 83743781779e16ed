"""Default configuration parameters for the startup gate."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TimingParams:
    """Watchdog and delay durations, in seconds."""
    startup_timeout: float = 30.0                   # Give up and show native app
    consolidation_window: float = 2.0               # Wait for deeplink after conversion
    first_run_grace: float = 5.0                    # Delay before organic re-fetch
    permission_cooldown: float = 259200.0           # 3 days between prompts
    temporary_url_delay: float = 2.0                # Push URL availability signal
    connectivity_interval: float = 5.0              # Reachability polling period
    http_timeout: float = 30.0


@dataclass(frozen=True)
class EndpointParams:
    """Remote services."""
    attribution_base_url: str = "https://gcdsdk.appsflyer.com/install_data/v4.0/"
    resolver_url: str = "https://smartscalepluss.com/config.php"
    checkpoint_database_url: str = "https://fishscaleplus-default-rtdb.firebaseio.com"
    checkpoint_path: str = "users/log/data"
    connectivity_host: str = "1.1.1.1"
    connectivity_port: int = 53


@dataclass(frozen=True)
class PlatformParams:
    """Identity of the installed app, sent with destination resolution."""
    app_id: str = "6757919278"
    dev_key: str = ""
    bundle_id: str = "com.saclingappplus.FishScalePlus"
    firebase_project_id: str = ""
    os_name: str = "iOS"
    locale: str = "EN"
    user_agent: str = "startup-gate/0.1"

    @property
    def store_id(self) -> str:
        return f"id{self.app_id}"


@dataclass(frozen=True)
class StorageParams:
    """Local persistence."""
    database_path: str = "startup_gate.db"


@dataclass(frozen=True)
class LoggingParams:
    """structlog output."""
    level: str = "INFO"
    format_json: bool = False
    include_caller: bool = False


@dataclass(frozen=True)
class Settings:
    """Complete configuration."""
    timing: TimingParams
    endpoints: EndpointParams
    platform: PlatformParams
    storage: StorageParams
    logging: LoggingParams


def get_default_settings() -> Settings:
    """Get the default configuration instance."""
    return Settings(
        timing=TimingParams(),
        endpoints=EndpointParams(),
        platform=PlatformParams(),
        storage=StorageParams(),
        logging=LoggingParams(),
    )
