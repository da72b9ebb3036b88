# ============================================================================
# CLAUDE CONTEXT - RESOURCE REGISTRY
# ============================================================================
# STATUS: Factory - Registers generated endpoints with the Function App
# PURPOSE: registerResource(descriptor) for every business entity at startup
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: ResourceRegistry, StoreFactory
# DEPENDENCIES: azure.functions
# PATTERNS: Factory Pattern, Dependency Injection
# ENTRY_POINTS: registry = ResourceRegistry(app, store_factory, geo_provider)
# ============================================================================

"""
Resource Registry

Turns a ResourceDescriptor into five Azure Functions. Collaborators are
injected once, when the registry is built:

    registry = ResourceRegistry(
        app,
        store_factory=lambda d: PostgresRecordStore(d.table, d.display_name),
        geo_provider=radar_client,      # or None when Radar is not configured
    )
    for descriptor in RESOURCE_DESCRIPTORS:
        registry.register(descriptor)

Registering the same endpoint path twice raises ResourceConfigurationError
(a startup-time configuration error).
"""

from datetime import datetime
from typing import Callable, Dict, List, Optional

import azure.functions as func

from util_logger import LoggerFactory, ComponentType
from infrastructure.record_store import RecordStore, utc_now
from services.geo_provider import GeoProvider
from .config import ResourceAPIConfig, get_resource_config
from .descriptor import ResourceDescriptor
from .errors import ResourceConfigurationError
from .service import ResourceService
from .triggers import get_resource_triggers

logger = LoggerFactory.create_logger(ComponentType.FACTORY, "ResourceRegistry")

StoreFactory = Callable[[ResourceDescriptor], RecordStore]


def bind_route(app: func.FunctionApp, name: str, route: str, methods: List[str], handler: Callable) -> None:
    """Register one handler as a uniquely named anonymous HTTP function."""

    def http_function(req: func.HttpRequest) -> func.HttpResponse:
        return handler(req)

    http_function.__name__ = name
    app.function_name(name=name)(
        app.route(route=route, methods=methods, auth_level=func.AuthLevel.ANONYMOUS)(http_function)
    )


class ResourceRegistry:
    """
    Endpoint factory bound to one Function App.

    Args:
        app: Azure Functions app receiving the routes
        store_factory: Builds the storage handle for a descriptor
        geo_provider: Provider client injected into every create pipeline
        config: Resource API configuration
        clock: UTC clock shared by all services
    """

    def __init__(
        self,
        app: func.FunctionApp,
        store_factory: StoreFactory,
        geo_provider: Optional[GeoProvider] = None,
        config: Optional[ResourceAPIConfig] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.app = app
        self.store_factory = store_factory
        self.geo_provider = geo_provider
        self.config = config or get_resource_config()
        self.clock = clock
        self._services: Dict[str, ResourceService] = {}

    def register(self, descriptor: ResourceDescriptor) -> ResourceService:
        """
        Register create/list/get/update/delete for one descriptor.

        Returns:
            The ResourceService backing the routes

        Raises:
            ResourceConfigurationError: Endpoint path already registered
        """
        path = descriptor.endpoint_path
        if path in self._services:
            raise ResourceConfigurationError(f"Endpoint path '{path}' is already registered")

        service = ResourceService(
            descriptor,
            self.store_factory(descriptor),
            geo_provider=self.geo_provider,
            config=self.config,
            clock=self.clock
        )

        for trigger in get_resource_triggers(descriptor, service):
            bind_route(self.app, trigger['name'], trigger['route'], trigger['methods'], trigger['handler'])
            logger.info(
                f"Registered {'/'.join(trigger['methods'])} /api/{trigger['route']}",
                extra={'custom_dimensions': {
                    'resource': path,
                    'function_name': trigger['name'],
                    'geo_policy': descriptor.geo_policy is not None
                }}
            )

        self._services[path] = service
        return service

    def service(self, endpoint_path: str) -> ResourceService:
        try:
            return self._services[endpoint_path]
        except KeyError:
            raise ResourceConfigurationError(f"Endpoint path '{endpoint_path}' is not registered") from None

    @property
    def registered_paths(self) -> List[str]:
        return list(self._services)
