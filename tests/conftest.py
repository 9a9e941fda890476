"""Pytest fixtures for Azure Provisioner tests."""

from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock

import pytest

from azure_provisioner.azure_client import AzureCloudClient
from azure_provisioner.config import Settings
from azure_provisioner.models import ProvisioningRequest, ResourceHandle, ResourceType

SUBSCRIPTION = "/subscriptions/00000000-0000-0000-0000-000000000000"

_PROVIDERS = {
    ResourceType.AVAILABILITY_SET: "Microsoft.Compute/availabilitySets",
    ResourceType.PUBLIC_IP_ADDRESS: "Microsoft.Network/publicIPAddresses",
    ResourceType.VIRTUAL_NETWORK: "Microsoft.Network/virtualNetworks",
    ResourceType.NETWORK_INTERFACE: "Microsoft.Network/networkInterfaces",
    ResourceType.VIRTUAL_MACHINE: "Microsoft.Compute/virtualMachines",
}


def resource_id(resource_type: ResourceType, group: str, name: str) -> str:
    """Build an ARM resource id the way Azure reports it."""
    if resource_type == ResourceType.RESOURCE_GROUP:
        return f"{SUBSCRIPTION}/resourceGroups/{name}"
    return f"{SUBSCRIPTION}/resourceGroups/{group}/providers/{_PROVIDERS[resource_type]}/{name}"


def sdk_model(name: str, id: str | None = None, location: str = "eastus") -> SimpleNamespace:
    """Stand-in for an Azure SDK model object."""
    return SimpleNamespace(name=name, id=id, location=location)


class FakeCollection:
    """Listing over the fake client's current resources."""

    def __init__(self, items: list[ResourceHandle]) -> None:
        self._items = items

    def list(self) -> list[ResourceHandle]:
        return list(self._items)


class FakeCloudClient:
    """In-memory cloud backend recording every call made against it."""

    def __init__(self) -> None:
        self.resources: dict[ResourceType, list[ResourceHandle]] = {t: [] for t in ResourceType}
        self.calls: list[tuple[str, Any]] = []
        self.requests: list[ProvisioningRequest] = []
        self.failures: dict[ResourceType, Exception] = {}

    def collection(self, resource_type: ResourceType) -> FakeCollection:
        self.calls.append(("list", resource_type))
        return FakeCollection(self.resources[resource_type])

    def create(self, request: ProvisioningRequest) -> ResourceHandle:
        self.calls.append(("create", request.resource_type))
        self.requests.append(request)
        if request.resource_type in self.failures:
            raise self.failures[request.resource_type]
        for dependency in request.dependencies:
            if dependency not in self.resources[dependency.type]:
                raise AssertionError(f"dependency {dependency.name} is not present")

        if request.resource_type == ResourceType.RESOURCE_GROUP:
            group = request.name
        else:
            group = request.parent_group_name
            if group not in [g.name for g in self.resources[ResourceType.RESOURCE_GROUP]]:
                raise AssertionError(f"parent group {group} is not present")

        handle = ResourceHandle(
            name=request.name,
            type=request.resource_type,
            id=resource_id(request.resource_type, group, request.name),
            resource_group=group,
            region=request.region,
        )
        self.resources[request.resource_type].append(handle)
        return handle

    def power_off(self, handle: ResourceHandle) -> None:
        self.calls.append(("power_off", handle.name))

    def delete_group(self, name: str, wait: bool = False) -> None:
        self.calls.append(("delete_group", name))
        for resource_type in ResourceType:
            self.resources[resource_type] = [
                h for h in self.resources[resource_type] if h.resource_group != name
            ]

    def created_types(self) -> list[ResourceType]:
        """Resource types passed to create(), in call order."""
        return [arg for call, arg in self.calls if call == "create"]

    def power_off_count(self) -> int:
        return sum(1 for call, _ in self.calls if call == "power_off")


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Create test settings with the default resource plan."""
    return Settings(
        _env_file=None,
        auth_location=str(tmp_path / "azure.auth"),
    )


@pytest.fixture
def fake_client() -> FakeCloudClient:
    """Create an empty in-memory cloud backend."""
    return FakeCloudClient()


@pytest.fixture
def mock_azure() -> SimpleNamespace:
    """Mocked Azure management clients."""
    return SimpleNamespace(
        resource=MagicMock(),
        compute=MagicMock(),
        network=MagicMock(),
    )


@pytest.fixture
def azure_client(mock_azure: SimpleNamespace) -> AzureCloudClient:
    """AzureCloudClient wired to mocked management clients."""
    return AzureCloudClient(mock_azure.resource, mock_azure.compute, mock_azure.network)


@pytest.fixture
def sdk_auth_json() -> str:
    """Credentials file in the JSON sdk-auth format."""
    return """{
  "clientId": "11111111-1111-1111-1111-111111111111",
  "clientSecret": "s3cr3t",
  "subscriptionId": "00000000-0000-0000-0000-000000000000",
  "tenantId": "22222222-2222-2222-2222-222222222222",
  "activeDirectoryEndpointUrl": "https://login.microsoftonline.com",
  "resourceManagerEndpointUrl": "https://management.azure.com/"
}"""


@pytest.fixture
def legacy_auth_properties() -> str:
    """Credentials file in the legacy properties format."""
    return """subscription=00000000-0000-0000-0000-000000000000
client=11111111-1111-1111-1111-111111111111
key=abc+def/ghi==
tenant=22222222-2222-2222-2222-222222222222
managementURI=https://management.core.windows.net/
baseURL=https://management.azure.com/
authURL=https://login.windows.net/
graphURL=https://graph.windows.net/
"""
