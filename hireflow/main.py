"""
hireflow main entry point.

Starts the resume-screening forwarding proxy.
"""

import sys


def main() -> int:
    """
    Run the proxy service with uvicorn.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    try:
        from hireflow.utils.logger import setup_logging, log

        setup_logging()
        log.info("Starting hireflow proxy...")

        from hireflow.utils.config import get_settings

        settings = get_settings()
        log.info(f"Environment: {settings.environment}")
        log.info(f"Primary webhook: {settings.webhook.webhook_url}")

        import uvicorn

        from hireflow.core.proxy.app import create_app

        uvicorn.run(
            create_app(settings),
            host=settings.proxy.host,
            port=settings.proxy.port,
            log_level=settings.logging.level.lower(),
        )
        return 0

    except KeyboardInterrupt:
        print("\nProxy interrupted by user.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
