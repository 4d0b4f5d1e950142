"""Storage and template selection models."""

from pydantic import BaseModel, ConfigDict, Field


class StorageSelection(BaseModel):
    """Chosen storage backend per role."""
    container_storage: str = Field(..., description="Backend for container root filesystems")
    template_storage: str = Field(..., description="Backend holding template archives")

    model_config = ConfigDict(frozen=True)


class TemplateSelection(BaseModel):
    """Chosen OS template."""
    template: str = Field(..., description="Template identifier from the catalog")
    family: str = Field(default="debian", description="OS family")
    version: str = Field(..., description="OS major version")
    is_fallback: bool = Field(default=False)

    model_config = ConfigDict(frozen=True)


class ResourceSelection(BaseModel):
    """Storage and template chosen for one run."""
    storage: StorageSelection
    template: TemplateSelection

    model_config = ConfigDict(frozen=True)

    @property
    def template_volume(self) -> str:
        """Volume id of the template archive, as ``pct create`` expects it."""
        return f"{self.storage.template_storage}:vztmpl/{self.template.template}"

    @property
    def os_version(self) -> str:
        return self.template.version
