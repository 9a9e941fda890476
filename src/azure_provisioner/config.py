"""Configuration management for Azure Provisioner."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import ImageReference


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PROVISIONER_",
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Credentials
    auth_location: str | None = Field(
        default=None,
        validation_alias="AZURE_AUTH_LOCATION",
        description="Path to the Azure credentials file",
    )

    # Placement
    group_name: str = Field(default="azure203ResourceGroup", description="Resource group name")
    region: str = Field(default="eastus", description="Azure region for every resource")

    # Availability set
    availability_set_name: str = Field(default="myAvSet", description="Availability set name")
    availability_set_sku: str = Field(default="Aligned", description="Availability set SKU")

    # Networking
    public_ip_name: str = Field(default="myPublicIP", description="Public IP address name")
    public_ip_allocation: str = Field(default="Dynamic", description="Public IP allocation method")
    network_name: str = Field(default="myVNet", description="Virtual network name")
    address_space: str = Field(default="10.0.0.0/16", description="Virtual network address space")
    subnet_name: str = Field(default="mySubnet", description="Subnet name")
    subnet_prefix: str = Field(default="10.0.0.0/24", description="Subnet address prefix")
    network_interface_name: str = Field(default="myNIC", description="Network interface name")

    # Virtual machine
    vm_name: str = Field(default="myVM", description="Virtual machine name")
    vm_size: str = Field(default="Standard_DS1_v2", description="Virtual machine size")
    image_publisher: str = Field(default="MicrosoftWindowsServer", description="Image publisher")
    image_offer: str = Field(default="WindowsServer", description="Image offer")
    image_sku: str = Field(default="2019-Datacenter", description="Image SKU")
    image_version: str = Field(default="latest", description="Image version")
    admin_username: str = Field(default="azureuser", description="VM administrator username")
    admin_password: str = Field(default="Azure12345678", description="VM administrator password")

    # Teardown
    wait_for_teardown: bool = Field(
        default=False, description="Block until the resource group delete completes"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Provisioner log level")
    log_format: str = Field(default="console", description="Log renderer: console or json")
    azure_log_level: str = Field(default="WARNING", description="Azure SDK HTTP log level")

    @property
    def image(self) -> ImageReference:
        """Image reference assembled from the image fields."""
        return ImageReference(
            publisher=self.image_publisher,
            offer=self.image_offer,
            sku=self.image_sku,
            version=self.image_version,
        )


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
