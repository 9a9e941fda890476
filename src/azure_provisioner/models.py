"""Data models for Azure Provisioner."""

from dataclasses import dataclass
from enum import Enum

from .exceptions import MissingDependencyError


class ResourceType(Enum):
    """Kinds of cloud objects the provisioner manages."""

    RESOURCE_GROUP = "ResourceGroup"
    AVAILABILITY_SET = "AvailabilitySet"
    PUBLIC_IP_ADDRESS = "PublicIPAddress"
    VIRTUAL_NETWORK = "VirtualNetwork"
    NETWORK_INTERFACE = "NetworkInterface"
    VIRTUAL_MACHINE = "VirtualMachine"

    @property
    def display_name(self) -> str:
        """Human-readable name used in progress logging."""
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    ResourceType.RESOURCE_GROUP: "a resource group",
    ResourceType.AVAILABILITY_SET: "an availability set",
    ResourceType.PUBLIC_IP_ADDRESS: "a public IP address",
    ResourceType.VIRTUAL_NETWORK: "a virtual network",
    ResourceType.NETWORK_INTERFACE: "a network interface",
    ResourceType.VIRTUAL_MACHINE: "a virtual machine",
}


class ResourceState(Enum):
    """Lifecycle state of a single resource during a run."""

    ABSENT = "absent"
    CREATING = "creating"
    PRESENT = "present"


@dataclass(frozen=True)
class ResourceHandle:
    """Reference to a provisioned cloud object."""

    name: str
    type: ResourceType
    id: str | None = None
    resource_group: str | None = None
    region: str | None = None


@dataclass(frozen=True)
class ImageReference:
    """Marketplace image used to boot a virtual machine."""

    publisher: str
    offer: str
    sku: str
    version: str = "latest"


@dataclass(frozen=True)
class ProvisioningRequest:
    """Desired state for one resource.

    Only the fields relevant to ``resource_type`` are read by the client;
    the rest stay at their defaults.
    """

    resource_type: ResourceType
    name: str
    region: str
    parent_group_name: str | None = None
    dependencies: tuple[ResourceHandle, ...] = ()

    # Availability set
    sku: str | None = None

    # Virtual network
    address_space: str | None = None
    subnet_name: str | None = None
    subnet_prefix: str | None = None

    # Public IP
    ip_allocation: str | None = None

    # Virtual machine
    image: ImageReference | None = None
    admin_username: str | None = None
    admin_password: str | None = None
    computer_name: str | None = None
    vm_size: str | None = None

    def dependency(self, resource_type: ResourceType) -> ResourceHandle:
        """Return the dependency handle of the given type."""
        for handle in self.dependencies:
            if handle.type == resource_type:
                return handle
        raise MissingDependencyError(
            f"{self.resource_type.value} {self.name!r} requires "
            f"{resource_type.display_name} dependency"
        )
