import logging
import os
import opentelemetry.trace
from azure.monitor.opentelemetry import configure_azure_monitor

# Only configure Azure Monitor when running inside Azure Functions
if os.environ.get("FUNCTIONS_WORKER_RUNTIME"):
    try:
        configure_azure_monitor()
        logging.info("Azure Monitor OpenTelemetry configured successfully")
    except Exception as e:
        logging.error(f"Error configuring Azure Monitor: {str(e)}")

tracer = opentelemetry.trace.get_tracer("catalog_api")

logger = logging.getLogger("catalog_api")
logger.setLevel(logging.INFO)

if not logger.handlers:
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    )
    logger.addHandler(console_handler)


def set_log_level(level: str) -> None:
    """Apply a level name such as DEBUG or WARNING to the package logger."""
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))


def get_child_logger(name):
    """Get a child logger with the given name."""
    return logger.getChild(name)
