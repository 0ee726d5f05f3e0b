import logging
import os
from pathlib import Path
from typing import Union

import requests

from gheboot.config import Config
from gheboot.errors import DiskImageNotFoundError, DownloadError

logger = logging.getLogger(__name__)


def image_filename(version: str) -> str:
    return Config.GHES_IMAGE_NAME_TEMPLATE.format(version=version)


def image_url(version: str) -> str:
    return Config.GHES_IMAGE_URL_TEMPLATE.format(version=version)


class ImageManager:
    """Handles the GHES QCOW2 disk image on the hypervisor's local disk."""

    def __init__(self, directory: Union[str, Path] = "."):
        self.directory = Path(directory)

    def path_for(self, version: str) -> Path:
        return self.directory / image_filename(version)

    def download(self, version: str) -> Path:
        """Download the image for ``version`` if not already present."""
        path = self.path_for(version)
        if os.path.isfile(path):
            logger.info(f"Image {path.name} already exists locally. Skipping download.")
            return path

        url = image_url(version)
        logger.info(f"⬇️  Downloading {path.name} from {url}...")
        partial = path.with_name(path.name + ".part")
        try:
            response = requests.get(url, stream=True)
            response.raise_for_status()
            with open(partial, "wb") as image_file:
                for chunk in response.iter_content(chunk_size=8192):
                    if chunk:
                        image_file.write(chunk)
        except (requests.RequestException, OSError) as e:
            if partial.exists():
                partial.unlink()
            raise DownloadError(f"Failed to download {url}: {e}") from e

        partial.replace(path)
        logger.info(f"Downloaded {path.name}.")
        return path

    def require(self, version: str) -> Path:
        """Return the local image path or raise if it is missing."""
        path = self.path_for(version)
        if not os.path.isfile(path):
            raise DiskImageNotFoundError(f"Disk image '{path}' not found")
        return path
