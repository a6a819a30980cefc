"""Onfleet resources and the operations each one exposes."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict

from .descriptors import CallDescriptor

if TYPE_CHECKING:
    from .client import Onfleet


class Resource:
    """Binds every descriptor in ``methods`` as an async method on the instance."""

    methods: Dict[str, CallDescriptor] = {}

    def __init__(self, client: "Onfleet") -> None:
        self._client = client
        for name, descriptor in self.methods.items():
            setattr(self, name, self._bind(descriptor))

    def _bind(self, descriptor: CallDescriptor) -> Callable[..., Awaitable[Any]]:
        async def call(*args: Any) -> Any:
            return await self._client.request(descriptor, *args)

        return call


class Administrators(Resource):
    methods = {
        "create": CallDescriptor("/admins", "POST"),
        "get": CallDescriptor("/admins", "GET"),
        "update": CallDescriptor("/admins/:adminId", "PUT"),
        "delete_one": CallDescriptor("/admins/:adminId", "DELETE"),
        "match_metadata": CallDescriptor("/admins/metadata", "POST"),
    }


class Containers(Resource):
    methods = {
        "get": CallDescriptor("/containers/:param/:containerId", "GET"),
    }


class CustomFields(Resource):
    methods = {
        "get": CallDescriptor("/customFields", "GET", query_params=True),
        "create": CallDescriptor("/customFields", "POST"),
        "update": CallDescriptor("/customFields", "PUT"),
        "delete_one": CallDescriptor("/customFields", "DELETE"),
    }


class Destinations(Resource):
    methods = {
        "create": CallDescriptor("/destinations", "POST"),
        "get": CallDescriptor("/destinations/:destinationId", "GET"),
        "match_metadata": CallDescriptor("/destinations/metadata", "POST"),
    }


class Hubs(Resource):
    methods = {
        "create": CallDescriptor("/hubs", "POST"),
        "get": CallDescriptor("/hubs", "GET"),
        "update": CallDescriptor("/hubs/:hubId", "PUT"),
    }


class Organization(Resource):
    methods = {
        "get": CallDescriptor("/organizations/:orgId", "GET", alt_path="/organization"),
        "insert_task": CallDescriptor("/containers/organization/:orgId", "PUT"),
    }


class Recipients(Resource):
    methods = {
        "create": CallDescriptor("/recipients", "POST"),
        "update": CallDescriptor("/recipients/:recipientId", "PUT"),
        "get": CallDescriptor("/recipients/:recipientId", "GET"),
        "match_metadata": CallDescriptor("/recipients/metadata", "POST"),
    }


class Tasks(Resource):
    methods = {
        "get": CallDescriptor("/tasks/:taskId", "GET", alt_path="/tasks/all", query_params=True),
        "create": CallDescriptor("/tasks", "POST"),
        "clone": CallDescriptor("/tasks/:taskId/clone", "POST"),
        "force_complete": CallDescriptor("/tasks/:taskId/complete", "POST"),
        "batch_create": CallDescriptor("/tasks/batch", "POST", timeout_ms=180000),
        "batch_create_async": CallDescriptor("/tasks/batch-async", "POST"),
        "update": CallDescriptor("/tasks/:taskId", "PUT"),
        "delete_one": CallDescriptor("/tasks/:taskId", "DELETE"),
        "auto_assign": CallDescriptor("/tasks/autoAssign", "POST"),
        "match_metadata": CallDescriptor("/tasks/metadata", "POST"),
    }


class Teams(Resource):
    methods = {
        "create": CallDescriptor("/teams", "POST"),
        "get": CallDescriptor("/teams/:teamId", "GET", alt_path="/teams"),
        "get_worker_eta": CallDescriptor("/teams/:teamId/estimate", "GET", query_params=True),
        "get_tasks": CallDescriptor("/teams/:teamId/tasks", "GET", query_params=True),
        "auto_dispatch": CallDescriptor("/teams/:teamId/dispatch", "POST"),
        "insert_task": CallDescriptor("/containers/teams/:teamId", "PUT"),
        "update": CallDescriptor("/teams/:teamId", "PUT"),
        "delete_one": CallDescriptor("/teams/:teamId", "DELETE"),
    }


class Webhooks(Resource):
    methods = {
        "create": CallDescriptor("/webhooks", "POST"),
        "get": CallDescriptor("/webhooks", "GET"),
        "delete_one": CallDescriptor("/webhooks/:webhookId", "DELETE"),
    }


class Workers(Resource):
    methods = {
        "get": CallDescriptor("/workers/:workerId", "GET", alt_path="/workers", query_params=True),
        "get_by_location": CallDescriptor("/workers/location", "GET", query_params=True),
        "create": CallDescriptor("/workers", "POST"),
        "set_schedule": CallDescriptor("/workers/:workerId/schedule", "POST"),
        "get_schedule": CallDescriptor("/workers/:workerId/schedule", "GET"),
        "get_tasks": CallDescriptor("/workers/:workerId/tasks", "GET", query_params=True),
        "update": CallDescriptor("/workers/:workerId", "PUT"),
        "delete_one": CallDescriptor("/workers/:workerId", "DELETE"),
        "insert_task": CallDescriptor("/containers/workers/:workerId", "PUT"),
        "match_metadata": CallDescriptor("/workers/metadata", "POST"),
        "get_delivery_manifest": CallDescriptor(
            "/integrations/marketplace",
            "POST",
            delivery_manifest_object=True,
            timeout_ms=180000,
        ),
    }


RESOURCES: Dict[str, type[Resource]] = {
    "admins": Administrators,
    "administrators": Administrators,
    "containers": Containers,
    "customfields": CustomFields,
    "destinations": Destinations,
    "hubs": Hubs,
    "organization": Organization,
    "recipients": Recipients,
    "tasks": Tasks,
    "teams": Teams,
    "webhooks": Webhooks,
    "workers": Workers,
}
