# logging_config.py - Structured logging for the plot regeneration job
import structlog
import logging
import os
import sys
from typing import Optional

def setup_logging(service_name: Optional[str] = None) -> None:
    """
    Configure structlog on top of stdlib logging.

    LOG_LEVEL sets the threshold. STRUCTURED_LOGGING (default: on under Railway)
    switches from console output to JSON lines.

    Args:
        service_name: Added to every event as "service" (e.g., "progress-plots-job")
    """
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]
    if service_name:
        processors.insert(0, lambda logger, method_name, event_dict:
                         dict(event_dict, service=service_name))

    is_production = os.getenv("RAILWAY_ENVIRONMENT_NAME") is not None
    use_json = os.getenv("STRUCTURED_LOGGING", "true" if is_production else "false").lower() == "true"
    if use_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level, logging.INFO),
        handlers=[logging.StreamHandler()],
        force=True  # Override existing configuration
    )

def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance

    Args:
        name: Logger name (usually module name)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)

class MetricsLogger:
    """Helper class for consistent metrics logging"""

    def __init__(self, logger: structlog.stdlib.BoundLogger):
        self.logger = logger

    def database_operation(self, operation: str, table: str, duration_ms: float,
                          rows_affected: int = None, **kwargs):
        """Log database operation metrics"""
        self.logger.info(
            "database_operation",
            operation=operation,
            table=table,
            duration_ms=duration_ms,
            rows_affected=rows_affected,
            **kwargs
        )

    def plot_command(self, command: str, search_name: str, returncode: Optional[int],
                     duration_ms: float, **kwargs):
        """Log one external plotting command"""
        self.logger.info(
            "plot_command",
            command=command,
            search_name=search_name,
            returncode=returncode,
            duration_ms=duration_ms,
            **kwargs
        )

    def regeneration_run(self, searches: int, regenerated: int, skipped: int,
                         command_failures: int, duration_ms: float, **kwargs):
        """Log the summary of one pass over the search catalog"""
        self.logger.info(
            "regeneration_run",
            searches=searches,
            regenerated=regenerated,
            skipped=skipped,
            command_failures=command_failures,
            duration_ms=duration_ms,
            **kwargs
        )

def get_metrics_logger(name: str) -> MetricsLogger:
    """Get a metrics logger instance"""
    logger = get_logger(name)
    return MetricsLogger(logger)
