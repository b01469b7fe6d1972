# Infrastructure clients
from clients.settings import (
    ConfigError,
    get_database_url,
    get_valkey_url,
    get_jwt_secret,
    get_email_config,
    get_msg91_config,
    get_storage_config,
    get_frontend_url,
    normalize_frontend_url,
    is_development,
)
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
from clients.email_client import EmailClient, EmailError
from clients.msg91_client import Msg91Client, Msg91Error
