import logging
import os

import sentry_sdk
from phoenix.otel import register

logger = logging.getLogger(__name__)

_initialized = False


def configure_logging(level="INFO"):
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def set_hosted_phoenix_instrumentation(api_key):
    """Set tracing instrumentation for Phoenix and Arize"""
    os.environ["OTEL_EXPORTER_OTLP_HEADERS"] = f"api_key={api_key}"
    os.environ["PHOENIX_CLIENT_HEADERS"] = f"api_key={api_key}"
    os.environ.setdefault("PHOENIX_COLLECTOR_ENDPOINT", "https://app.phoenix.arize.com")
    # register() picks up the endpoint and headers from the environment
    register(project_name="decision-tracker", batch=True, auto_instrument=True)
    logger.info("Phoenix tracing instrumentation set")


def initiate_sentry(dsn):
    sentry_sdk.init(dsn=dsn, traces_sample_rate=1.0)
    logger.info("Sentry initialized")


def initiate_tracing(settings):
    """Start error reporting and tracing for whichever backends are configured."""
    global _initialized
    if _initialized:
        return
    if settings.phoenix_api_key:
        set_hosted_phoenix_instrumentation(settings.phoenix_api_key)
    if settings.sentry_dsn:
        initiate_sentry(settings.sentry_dsn)
    _initialized = True


def report_exception(exc):
    # no-op when Sentry was never initialised
    sentry_sdk.capture_exception(exc)
