from .factory import get_authorizer_client, get_healthie_client, get_upstream_config, reset_clients

__all__ = [
    "get_authorizer_client",
    "get_healthie_client",
    "get_upstream_config",
    "reset_clients",
]
