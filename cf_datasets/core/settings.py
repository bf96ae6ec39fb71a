from anystore.settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="cf_datasets_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    uri: str = "data"
    """Backing anystore uri for tables and schemas"""

    coordination_endpoint: str | None = None
    """Cluster coordination host (e.g. the zookeeper quorum)"""

    coordination_port: int | None = None
    """Cluster coordination client port"""

    store_kind: str = "hbase"
    """Store kind used in repository uris"""

    debug: bool = False
    log_level: str = "INFO"
