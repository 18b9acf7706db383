"""Entry point for the CRM duplicate-review proxy server."""

import sys

from dotenv import load_dotenv

# Load environment variables before the package reads LOG_LEVEL and SF_* settings
load_dotenv('.env')

from crm_proxy.auth import get_broker  # noqa: E402
from crm_proxy.auth.strategies import CliStrategy  # noqa: E402
from crm_proxy.config import ServerSettings  # noqa: E402
from crm_proxy.server.app import create_http_middleware, create_server  # noqa: E402
from crm_proxy.utils.logging import get_logger  # noqa: E402
from crm_proxy.utils.ports import find_available_port  # noqa: E402

logger = get_logger("main")

CREDENTIAL_HINT = (
    "Set SF_SESSION_TOKEN, or SF_CLIENT_ID, SF_CLIENT_SECRET, SF_USERNAME, "
    "SF_PASSWORD and SF_SECURITY_TOKEN, or SF_PRIVATE_KEY_PATH"
)


def log_credential_status(strategies):
    """Report which strategies will be tried, warning when none come from configuration."""
    configured = [name for name in strategies if name != CliStrategy.name]
    if configured:
        logger.info("Salesforce authentication order: %s", ", ".join(strategies))
    elif strategies:
        logger.warning(
            "Missing Salesforce credentials, relying on the Salesforce CLI fallback; "
            "requests are served offline if it fails. %s", CREDENTIAL_HINT
        )
    else:
        logger.warning(
            "Missing Salesforce credentials, every request will be served offline. %s",
            CREDENTIAL_HINT,
        )


def main():
    """Main entry point."""
    settings = ServerSettings.from_env()
    try:
        port = find_available_port(settings.host, settings.port, settings.port_attempts)
    except (RuntimeError, OSError) as e:
        logger.error(f"Failed to start server: {e}")
        sys.exit(1)

    log_credential_status(get_broker().describe())

    if port != settings.port:
        logger.info(f"Using port {port} instead of default {settings.port}")

    try:
        server = create_server()
        logger.info(f"Salesforce proxy server running on http://{settings.host}:{port}")
        server.run(
            transport="http",
            host=settings.host,
            port=port,
            middleware=create_http_middleware(settings),
        )
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Server failed to start: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
