"""Storage backend and template selection."""

import logging
from typing import Optional

from netspawn.errors import SelectionError
from netspawn.models.resources import ResourceSelection, StorageSelection, TemplateSelection
from netspawn.providers.base import BaseProvider


logger = logging.getLogger(__name__)


class ResourceSelector(BaseProvider):
    """Picks container storage, template storage and an OS template.

    Read-only with respect to the host, apart from refreshing the
    template catalog cache.
    """

    name = "storage"

    def __init__(self):
        super().__init__()
        self._selection: Optional[ResourceSelection] = None

    def setup(self, registry):
        pass

    def select_storage(self) -> StorageSelection:
        """Choose one backend for container roots and one for templates."""
        logger.info("Detecting available storage...")

        candidates = self.host.storage_names(content="rootdir")
        container_storage = candidates[0] if candidates else None

        if container_storage is None:
            # Some hosts do not tag backends by content; fall back to names.
            listed = set(self.host.storage_names())
            for name in self.config.storage.fallback_names:
                if name in listed:
                    container_storage = name
                    logger.debug(f"Using fallback storage name {name}")
                    break

        if container_storage is None:
            raise SelectionError("No suitable storage found for containers")

        template_candidates = self.host.storage_names(content="vztmpl")
        if template_candidates:
            template_storage = template_candidates[0]
        else:
            template_storage = self.config.storage.template_default

        logger.info(f"Using storage: {container_storage}")
        logger.info(f"Template storage: {template_storage}")
        return StorageSelection(
            container_storage=container_storage,
            template_storage=template_storage,
        )

    def select_template(self) -> TemplateSelection:
        """Choose the first catalog template of the primary or fallback version."""
        settings = self.config.template

        logger.info("Updating template database...")
        if not self.host.update_catalog():
            logger.warning("Template database update failed, using cached catalog")

        primary = self.host.available_templates(
            settings.section, settings.needle(settings.primary_version)
        )
        if primary:
            logger.info(f"Found {settings.family} {settings.primary_version} template: {primary[0]}")
            return TemplateSelection(
                template=primary[0],
                family=settings.family,
                version=settings.primary_version,
            )

        logger.warning(
            f"{settings.family} {settings.primary_version} template not available, "
            f"falling back to {settings.family} {settings.fallback_version}"
        )
        fallback = self.host.available_templates(
            settings.section, settings.needle(settings.fallback_version)
        )
        if fallback:
            logger.info(f"Found {settings.family} {settings.fallback_version} template: {fallback[0]}")
            return TemplateSelection(
                template=fallback[0],
                family=settings.family,
                version=settings.fallback_version,
                is_fallback=True,
            )

        raise SelectionError(f"No suitable {settings.family} template found")

    def select(self) -> ResourceSelection:
        """Storage and template for this run, computed once."""
        if self._selection is None:
            self._selection = ResourceSelection(
                storage=self.select_storage(),
                template=self.select_template(),
            )
        return self._selection
