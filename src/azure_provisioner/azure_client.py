"""Azure management client wrapper for Azure Provisioner."""

import logging
from collections.abc import Callable, Iterable, Iterator
from typing import Any

import structlog
from azure.mgmt.compute import ComputeManagementClient
from azure.mgmt.compute import models as compute_models
from azure.mgmt.core.tools import parse_resource_id
from azure.mgmt.network import NetworkManagementClient
from azure.mgmt.network import models as network_models
from azure.mgmt.resource import ResourceManagementClient
from azure.mgmt.resource.resources import models as resource_models

from .config import Settings
from .credentials import load_credentials
from .models import ProvisioningRequest, ResourceHandle, ResourceType

logger = structlog.get_logger()

# Defaults applied by the Azure portal and the fluent SDKs for aligned sets
AVAILABILITY_SET_FAULT_DOMAINS = 2
AVAILABILITY_SET_UPDATE_DOMAINS = 5


def to_handle(resource_type: ResourceType, model: Any) -> ResourceHandle:
    """Convert an SDK model object into a ResourceHandle."""
    resource_id = getattr(model, "id", None)
    if resource_type == ResourceType.RESOURCE_GROUP:
        resource_group = model.name
    elif resource_id:
        resource_group = parse_resource_id(resource_id).get("resource_group")
    else:
        resource_group = None
    return ResourceHandle(
        name=model.name,
        type=resource_type,
        id=resource_id,
        resource_group=resource_group,
        region=getattr(model, "location", None),
    )


class ResourceCollection:
    """Every resource of one type visible to the current credentials."""

    def __init__(self, resource_type: ResourceType, lister: Callable[[], Iterable[Any]]) -> None:
        self.resource_type = resource_type
        self._lister = lister

    def list(self) -> Iterator[ResourceHandle]:
        """Yield a handle for each listed resource."""
        for model in self._lister():
            yield to_handle(self.resource_type, model)


class AzureCloudClient:
    """Wrapper for Azure Resource Manager operations used by the provisioner."""

    def __init__(
        self,
        resource_client: ResourceManagementClient,
        compute_client: ComputeManagementClient,
        network_client: NetworkManagementClient,
    ) -> None:
        """Initialize with already-authenticated management clients."""
        self.resource_client = resource_client
        self.compute_client = compute_client
        self.network_client = network_client
        self._creators: dict[ResourceType, Callable[[ProvisioningRequest], Any]] = {
            ResourceType.RESOURCE_GROUP: self._create_resource_group,
            ResourceType.AVAILABILITY_SET: self._create_availability_set,
            ResourceType.PUBLIC_IP_ADDRESS: self._create_public_ip_address,
            ResourceType.VIRTUAL_NETWORK: self._create_virtual_network,
            ResourceType.NETWORK_INTERFACE: self._create_network_interface,
            ResourceType.VIRTUAL_MACHINE: self._create_virtual_machine,
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> "AzureCloudClient":
        """Authenticate from the configured auth file and build the clients."""
        logging.getLogger("azure").setLevel(settings.azure_log_level.upper())
        creds = load_credentials(settings.auth_location)
        return cls(
            ResourceManagementClient(creds.credential, creds.subscription_id),
            ComputeManagementClient(creds.credential, creds.subscription_id),
            NetworkManagementClient(creds.credential, creds.subscription_id),
        )

    def collection(self, resource_type: ResourceType) -> ResourceCollection:
        """Return the subscription-wide collection for a resource type."""
        listers: dict[ResourceType, Callable[[], Iterable[Any]]] = {
            ResourceType.RESOURCE_GROUP: self.resource_client.resource_groups.list,
            ResourceType.AVAILABILITY_SET: self.compute_client.availability_sets.list_by_subscription,
            ResourceType.PUBLIC_IP_ADDRESS: self.network_client.public_ip_addresses.list_all,
            ResourceType.VIRTUAL_NETWORK: self.network_client.virtual_networks.list_all,
            ResourceType.NETWORK_INTERFACE: self.network_client.network_interfaces.list_all,
            ResourceType.VIRTUAL_MACHINE: self.compute_client.virtual_machines.list_all,
        }
        return ResourceCollection(resource_type, listers[resource_type])

    def create(self, request: ProvisioningRequest) -> ResourceHandle:
        """Create the resource described by ``request`` and wait for it."""
        model = self._creators[request.resource_type](request)
        return to_handle(request.resource_type, model)

    def power_off(self, handle: ResourceHandle) -> None:
        """Power off a virtual machine, blocking until the operation finishes."""
        poller = self.compute_client.virtual_machines.begin_power_off(
            resource_group_name=handle.resource_group,
            vm_name=handle.name,
        )
        poller.result()

    def delete_group(self, name: str, wait: bool = False) -> None:
        """Delete a resource group and everything in it."""
        poller = self.resource_client.resource_groups.begin_delete(resource_group_name=name)
        if wait:
            poller.result()

    def _create_resource_group(self, request: ProvisioningRequest) -> Any:
        return self.resource_client.resource_groups.create_or_update(
            resource_group_name=request.name,
            parameters=resource_models.ResourceGroup(location=request.region),
        )

    def _create_availability_set(self, request: ProvisioningRequest) -> Any:
        return self.compute_client.availability_sets.create_or_update(
            resource_group_name=request.parent_group_name,
            availability_set_name=request.name,
            parameters=compute_models.AvailabilitySet(
                location=request.region,
                sku=compute_models.Sku(name=request.sku),
                platform_fault_domain_count=AVAILABILITY_SET_FAULT_DOMAINS,
                platform_update_domain_count=AVAILABILITY_SET_UPDATE_DOMAINS,
            ),
        )

    def _create_public_ip_address(self, request: ProvisioningRequest) -> Any:
        poller = self.network_client.public_ip_addresses.begin_create_or_update(
            resource_group_name=request.parent_group_name,
            public_ip_address_name=request.name,
            parameters=network_models.PublicIPAddress(
                location=request.region,
                public_ip_allocation_method=request.ip_allocation,
            ),
        )
        return poller.result()

    def _create_virtual_network(self, request: ProvisioningRequest) -> Any:
        poller = self.network_client.virtual_networks.begin_create_or_update(
            resource_group_name=request.parent_group_name,
            virtual_network_name=request.name,
            parameters=network_models.VirtualNetwork(
                location=request.region,
                address_space=network_models.AddressSpace(
                    address_prefixes=[request.address_space]
                ),
                subnets=[
                    network_models.Subnet(
                        name=request.subnet_name,
                        address_prefix=request.subnet_prefix,
                    )
                ],
            ),
        )
        return poller.result()

    def _create_network_interface(self, request: ProvisioningRequest) -> Any:
        public_ip = request.dependency(ResourceType.PUBLIC_IP_ADDRESS)
        network = request.dependency(ResourceType.VIRTUAL_NETWORK)
        subnet_id = f"{network.id}/subnets/{request.subnet_name}"
        poller = self.network_client.network_interfaces.begin_create_or_update(
            resource_group_name=request.parent_group_name,
            network_interface_name=request.name,
            parameters=network_models.NetworkInterface(
                location=request.region,
                ip_configurations=[
                    network_models.NetworkInterfaceIPConfiguration(
                        name=f"{request.name}-ipconfig",
                        primary=True,
                        subnet=network_models.Subnet(id=subnet_id),
                        private_ip_allocation_method=network_models.IPAllocationMethod.DYNAMIC,
                        public_ip_address=network_models.PublicIPAddress(id=public_ip.id),
                    )
                ],
            ),
        )
        return poller.result()

    def _create_virtual_machine(self, request: ProvisioningRequest) -> Any:
        nic = request.dependency(ResourceType.NETWORK_INTERFACE)
        availability_set = request.dependency(ResourceType.AVAILABILITY_SET)
        image = request.image
        if image is None:
            raise ValueError(f"Virtual machine {request.name!r} requires an image reference")
        poller = self.compute_client.virtual_machines.begin_create_or_update(
            resource_group_name=request.parent_group_name,
            vm_name=request.name,
            parameters=compute_models.VirtualMachine(
                location=request.region,
                hardware_profile=compute_models.HardwareProfile(vm_size=request.vm_size),
                storage_profile=compute_models.StorageProfile(
                    image_reference=compute_models.ImageReference(
                        publisher=image.publisher,
                        offer=image.offer,
                        sku=image.sku,
                        version=image.version,
                    )
                ),
                os_profile=compute_models.OSProfile(
                    computer_name=request.computer_name or request.name,
                    admin_username=request.admin_username,
                    admin_password=request.admin_password,
                ),
                network_profile=compute_models.NetworkProfile(
                    network_interfaces=[
                        compute_models.NetworkInterfaceReference(id=nic.id, primary=True)
                    ]
                ),
                availability_set=compute_models.SubResource(id=availability_set.id),
            ),
        )
        return poller.result()
