"""Idempotent get-or-create provisioning of the VM resource chain."""

from collections.abc import Iterable
from typing import Protocol

import structlog

from .config import Settings
from .models import ProvisioningRequest, ResourceHandle, ResourceState, ResourceType

logger = structlog.get_logger()


class SupportsListing(Protocol):
    """Anything that can enumerate its resources."""

    def list(self) -> Iterable[ResourceHandle]: ...


class CloudClient(Protocol):
    """Operations the provisioner needs from the cloud backend."""

    def collection(self, resource_type: ResourceType) -> SupportsListing: ...

    def create(self, request: ProvisioningRequest) -> ResourceHandle: ...

    def power_off(self, handle: ResourceHandle) -> None: ...

    def delete_group(self, name: str, wait: bool = False) -> None: ...


def find_existing(collection: SupportsListing, name: str) -> ResourceHandle | None:
    """Return the first resource whose name equals ``name`` exactly, else None."""
    for item in collection.list():
        if item.name == name:
            return item
    return None


class ResourceProvisioner:
    """Ensures the resource chain exists, then powers the VM off.

    Lookups happen before every create, so re-running after a partial failure
    resumes at the step that failed. Backend errors are not caught here.
    """

    def __init__(self, client: CloudClient, settings: Settings) -> None:
        self.client = client
        self.settings = settings

    def get_or_create(self, request: ProvisioningRequest) -> ResourceHandle:
        """Return the existing resource named in ``request`` or create it.

        An existing resource is returned as-is; its properties are not
        compared against the request.
        """
        kind = request.resource_type.display_name
        logger.info("Searching for resource", kind=kind, name=request.name)
        existing = find_existing(self.client.collection(request.resource_type), request.name)
        if existing is not None:
            logger.info(
                "Reusing existing resource",
                kind=kind,
                name=existing.name,
                state=ResourceState.PRESENT.value,
            )
            return existing

        logger.info("Resource not found", kind=kind, name=request.name, state=ResourceState.ABSENT.value)
        logger.info(
            "Creating resource",
            kind=kind,
            name=request.name,
            state=ResourceState.CREATING.value,
            group=request.parent_group_name,
        )
        handle = self.client.create(request)
        logger.info("Created resource", kind=kind, name=handle.name, state=ResourceState.PRESENT.value)
        return handle

    def create_objects(self) -> ResourceHandle:
        """Provision group, availability set, network and VM, then power the VM off."""
        s = self.settings

        group = self.get_or_create(
            ProvisioningRequest(
                resource_type=ResourceType.RESOURCE_GROUP,
                name=s.group_name,
                region=s.region,
            )
        )
        availability_set = self.get_or_create(
            ProvisioningRequest(
                resource_type=ResourceType.AVAILABILITY_SET,
                name=s.availability_set_name,
                region=s.region,
                parent_group_name=group.name,
                sku=s.availability_set_sku,
            )
        )
        public_ip = self.get_or_create(
            ProvisioningRequest(
                resource_type=ResourceType.PUBLIC_IP_ADDRESS,
                name=s.public_ip_name,
                region=s.region,
                parent_group_name=group.name,
                ip_allocation=s.public_ip_allocation,
            )
        )
        network = self.get_or_create(
            ProvisioningRequest(
                resource_type=ResourceType.VIRTUAL_NETWORK,
                name=s.network_name,
                region=s.region,
                parent_group_name=group.name,
                address_space=s.address_space,
                subnet_name=s.subnet_name,
                subnet_prefix=s.subnet_prefix,
            )
        )
        network_interface = self.get_or_create(
            ProvisioningRequest(
                resource_type=ResourceType.NETWORK_INTERFACE,
                name=s.network_interface_name,
                region=s.region,
                parent_group_name=group.name,
                dependencies=(public_ip, network),
                subnet_name=s.subnet_name,
            )
        )
        virtual_machine = self.get_or_create(
            ProvisioningRequest(
                resource_type=ResourceType.VIRTUAL_MACHINE,
                name=s.vm_name,
                region=s.region,
                parent_group_name=group.name,
                dependencies=(network_interface, availability_set),
                image=s.image,
                admin_username=s.admin_username,
                admin_password=s.admin_password,
                computer_name=s.vm_name,
                vm_size=s.vm_size,
            )
        )

        logger.info("Stopping virtual machine", name=virtual_machine.name)
        self.client.power_off(virtual_machine)
        logger.info("Virtual machine stopped", name=virtual_machine.name)
        return virtual_machine

    def delete_resource_group(self, name: str | None = None) -> None:
        """Issue a cascading delete of the resource group."""
        group_name = name or self.settings.group_name
        logger.info("Deleting resource group", name=group_name, wait=self.settings.wait_for_teardown)
        self.client.delete_group(group_name, wait=self.settings.wait_for_teardown)
        logger.info("Resource group delete issued", name=group_name)
