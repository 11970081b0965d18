from metapairs.app.service import MetadataStore
from metapairs.app.settings import (
    DatabaseConfig,
    MetadataStoreConfig,
    ParentLinkConfig,
    load_database_config_from_env,
)

__all__ = [
    "DatabaseConfig",
    "MetadataStore",
    "MetadataStoreConfig",
    "ParentLinkConfig",
    "load_database_config_from_env",
]
