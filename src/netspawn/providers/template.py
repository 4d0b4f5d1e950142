"""Template provider making sure the OS image is stored locally."""

import logging
import subprocess

from netspawn.errors import TransferError
from netspawn.models.resources import ResourceSelection
from netspawn.providers.base import BaseProvider, ProviderStatus


logger = logging.getLogger(__name__)


class TemplateProvider(BaseProvider):
    """Provider for Proxmox container templates."""

    name = "template"

    def setup(self, registry):
        pass

    def status(self, selection: ResourceSelection) -> ProviderStatus:
        """Check if the template archive is in the template storage."""
        try:
            present = self.host.template_present(
                selection.storage.template_storage,
                selection.template.template,
            )
        except Exception as e:
            logger.error(f"Error checking template {selection.template.template}: {e}")
            return ProviderStatus.ERROR
        return ProviderStatus.PRESENT if present else ProviderStatus.ABSENT

    def ensure_template(self, selection: ResourceSelection) -> None:
        """Download the template unless it is already stored."""
        template = selection.template.template
        storage = selection.storage.template_storage

        if self.status(selection) == ProviderStatus.PRESENT:
            logger.info("Template already downloaded")
            return

        logger.info(f"Downloading template: {template}...")
        try:
            self.host.download_template(storage, template)
        except subprocess.CalledProcessError as e:
            logger.error(f"Failed to download template {template}: {e}. Stderr: {e.stderr}")
            raise TransferError(f"Failed to download template {template} to {storage}") from e
        logger.info("Template downloaded successfully")
