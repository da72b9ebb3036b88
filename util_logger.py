# ============================================================================
# CLAUDE CONTEXT - LOGGING
# ============================================================================
# STATUS: Core Infrastructure - Structured logging
# PURPOSE: JSON-only structured logging for Azure Functions with Application Insights
# EXPORTS: ComponentType, LogLevel, LogContext, ComponentConfig, JSONFormatter, LoggerFactory, log_exceptions
# INTERFACES: Dataclass models, enums, factory, JSON formatter, exception decorator
# DEPENDENCIES: enum, dataclasses, typing, datetime, logging, json, traceback (stdlib only!)
# SOURCE: Application architecture layers define component types
# SCOPE: Foundation and factory layers for all logging in the application
# PATTERNS: JSON-only output, Azure Functions integration, Exception decorator pattern
# ENTRY_POINTS: LoggerFactory.create_logger(), @log_exceptions decorator
# ============================================================================

"""
Unified Logger System - Schemas and Factory

Component-specific loggers that emit one JSON object per line so that
Application Insights can parse custom dimensions without extra configuration.

Design Principles:
- Strong typing with dataclasses (stdlib only)
- Enum safety for categories
- Component-specific loggers
- Request correlation through LogContext

Usage:
    from util_logger import LoggerFactory, ComponentType, LogContext

    logger = LoggerFactory.create_logger(ComponentType.SERVICE, "ResourceService")
    logger.info("Record created", extra={'custom_dimensions': {'resource': 'dvr'}})
"""

from enum import Enum
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from dataclasses import dataclass
import logging
import os
import sys
import json
import traceback
from functools import wraps


# ============================================================================
# COMPONENT TYPES - Aligned with application layers
# ============================================================================

class ComponentType(Enum):
    """
    Component types aligned with the application layers.

    Each layer has specific logging needs and levels.
    """
    TRIGGER = "trigger"        # HTTP entry points
    SERVICE = "service"        # Business logic (resource service, create pipeline)
    REPOSITORY = "repository"  # Data access layer
    FACTORY = "factory"        # Route registration
    ADAPTER = "adapter"        # External integrations (Radar)
    VALIDATOR = "validator"    # Record validation


# ============================================================================
# LOG LEVELS - Standard Python levels with enum safety
# ============================================================================

class LogLevel(Enum):
    """
    Standard Python log levels as enum for type safety.
    """
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_python_level(self) -> int:
        """Convert to Python logging level constant."""
        return getattr(logging, self.value)


# ============================================================================
# LOG CONTEXT - Request correlation
# ============================================================================

@dataclass
class LogContext:
    """
    Context for log correlation across a single request.
    """
    resource: Optional[str] = None    # Resource endpoint path (dvr, attendance, ...)
    operation: Optional[str] = None   # create, list, get, update, delete
    owner_id: Optional[str] = None    # Owning field agent
    record_id: Optional[str] = None   # Stored record identifier
    request_id: Optional[str] = None  # HTTP request ID

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            k: v for k, v in {
                'resource': self.resource,
                'operation': self.operation,
                'owner_id': self.owner_id,
                'record_id': self.record_id,
                'request_id': self.request_id
            }.items() if v is not None
        }


# ============================================================================
# COMPONENT CONFIGURATION - Per-component settings
# ============================================================================

@dataclass
class ComponentConfig:
    """
    Configuration for component-specific logging.
    """
    component_type: ComponentType
    log_level: LogLevel = LogLevel.INFO
    enable_debug_context: bool = False


# ============================================================================
# JSON FORMATTER - Structured logging for Azure Functions
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging in Azure Functions.
    Outputs logs in a format that Application Insights can automatically parse.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON for Application Insights.

        Args:
            record: Python LogRecord to format

        Returns:
            JSON string with structured log data
        """
        log_obj = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name,
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if hasattr(record, 'custom_dimensions'):
            log_obj['customDimensions'] = record.custom_dimensions

        if record.exc_info:
            log_obj['exception'] = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None,
                'traceback': self.formatException(record.exc_info)
            }

        return json.dumps(log_obj, default=str)


# ============================================================================
# LOGGER FACTORY - Creates component-specific loggers
# ============================================================================

class LoggerFactory:
    """
    Factory for creating component-specific loggers.

    Example:
        logger = LoggerFactory.create_logger(
            ComponentType.ADAPTER,
            "RadarClient"
        )
        logger.info("Calling Radar")
    """

    default_level = LogLevel.DEBUG if os.getenv('DEBUG_LOGGING', '').lower() == 'true' else LogLevel.INFO

    DEFAULT_CONFIGS = {
        ComponentType.TRIGGER: ComponentConfig(
            component_type=ComponentType.TRIGGER,
            log_level=default_level
        ),
        ComponentType.SERVICE: ComponentConfig(
            component_type=ComponentType.SERVICE,
            log_level=default_level,
            enable_debug_context=default_level == LogLevel.DEBUG
        ),
        ComponentType.REPOSITORY: ComponentConfig(
            component_type=ComponentType.REPOSITORY,
            log_level=default_level,
            enable_debug_context=True
        ),
        ComponentType.FACTORY: ComponentConfig(
            component_type=ComponentType.FACTORY,
            log_level=default_level
        ),
        ComponentType.ADAPTER: ComponentConfig(
            component_type=ComponentType.ADAPTER,
            log_level=default_level
        ),
        ComponentType.VALIDATOR: ComponentConfig(
            component_type=ComponentType.VALIDATOR,
            log_level=default_level
        )
    }

    @classmethod
    def create_logger(
        cls,
        component_type: ComponentType,
        name: str,
        context: Optional[LogContext] = None,
        config: Optional[ComponentConfig] = None
    ) -> logging.Logger:
        """
        Create a logger for a specific component.

        Args:
            component_type: Type of component
            name: Component name (e.g., "ResourceService")
            context: Optional log context for correlation
            config: Optional custom configuration

        Returns:
            Configured Python logger
        """
        if config is None:
            config = cls.DEFAULT_CONFIGS.get(
                component_type,
                ComponentConfig(component_type=component_type)
            )

        # Hierarchical logger name, e.g. "service.ResourceService.dvr"
        logger_name = f"{component_type.value}.{name}"
        if context and context.resource:
            logger_name = f"{logger_name}.{context.resource}"
        logger = logging.getLogger(logger_name)

        log_level = config.log_level.to_python_level()
        logger.setLevel(log_level)

        # Remove existing handlers to avoid duplicates
        logger.handlers.clear()

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(log_level)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)

        # Allow propagation to Azure's root logger for Application Insights
        logger.propagate = True

        # Class method, never a wrapper left by an earlier create_logger call
        original_log = type(logger)._log.__get__(logger)

        def log_with_context(level, msg, args, exc_info=None, extra=None, stack_info=False, stacklevel=1):
            """Wrapper to inject context as custom dimensions."""
            if extra is None:
                extra = {}

            custom_dims = context.to_dict() if context else {}
            custom_dims['component_type'] = component_type.value
            custom_dims['component_name'] = name

            if 'custom_dimensions' in extra:
                custom_dims.update(extra['custom_dimensions'])

            extra['custom_dimensions'] = custom_dims

            original_log(level, msg, args, exc_info=exc_info, extra=extra,
                         stack_info=stack_info, stacklevel=stacklevel)

        logger._log = log_with_context

        return logger


# ============================================================================
# EXCEPTION DECORATOR - Automatic exception logging with context
# ============================================================================

def log_exceptions(component_type: Optional[ComponentType] = None,
                   component_name: Optional[str] = None,
                   logger: Optional[logging.Logger] = None):
    """
    Decorator to automatically log exceptions with full context.

    Can be used in three ways:
    1. With existing logger: @log_exceptions(logger=my_logger)
    2. With component info: @log_exceptions(ComponentType.SERVICE, "Dashboard")
    3. Simple: @log_exceptions() - uses function module and name

    The exception is always re-raised.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if logger:
                log = logger
            elif component_type and component_name:
                log = LoggerFactory.create_logger(component_type, component_name)
            else:
                log = LoggerFactory.create_logger(
                    ComponentType.SERVICE,
                    func.__module__ or "unknown"
                )

            try:
                return func(*args, **kwargs)
            except Exception as e:
                log.error(
                    f"Exception in {func.__name__}",
                    exc_info=True,
                    extra={
                        'custom_dimensions': {
                            'function_name': func.__name__,
                            'function_module': func.__module__,
                            'exception_type': type(e).__name__,
                            'exception_message': str(e),
                            'traceback': traceback.format_exc()
                        }
                    }
                )
                raise
        return wrapper
    return decorator
