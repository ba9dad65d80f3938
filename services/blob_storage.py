"""Azure Blob Storage service for container listing and blob URLs."""
import base64
import hashlib
import hmac
import logging
from email.utils import formatdate
from typing import Optional
from urllib.parse import quote

import httpx

from config import AzureStorageConfig

logger = logging.getLogger(__name__)


class BlobStorageRequestError(Exception):
    """Raised when the blob service answers with a non-2xx status."""

    def __init__(self, status_code: int, details: str):
        super().__init__(f"Blob storage request failed ({status_code})")
        self.status_code = status_code
        self.details = details


def rfc1123_now() -> str:
    return formatdate(usegmt=True)


def list_string_to_sign(account: str, container: str, date: str, api_version: str) -> str:
    """Canonical string for a shared-key signed container listing."""
    return (
        "GET" + "\n" * 12
        + f"x-ms-date:{date}\nx-ms-version:{api_version}\n"
        + f"/{account}/{container}\ncomp:list\nrestype:container"
    )


def sign(key: str, string_to_sign: str) -> str:
    """HMAC-SHA256 over `string_to_sign` with the base64-encoded account key."""
    digest = hmac.new(base64.b64decode(key), string_to_sign.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


class BlobStorageService:
    """Service class for Azure Blob Storage operations."""

    def __init__(self, config: AzureStorageConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport

    @property
    def container(self) -> str:
        return self.config.container

    def list_headers(self, date: str) -> dict:
        """
        Build the signed headers for a container listing.

        Args:
            date: RFC 1123 timestamp sent as `x-ms-date`

        Returns:
            dict: request headers including the SharedKey authorization
        """
        string_to_sign = list_string_to_sign(
            self.config.account, self.config.container, date, self.config.api_version
        )
        signature = sign(self.config.key, string_to_sign)
        return {
            "x-ms-date": date,
            "x-ms-version": self.config.api_version,
            "Authorization": f"SharedKey {self.config.account}:{signature}",
        }

    async def list_blobs(self) -> str:
        """
        List the blobs of the configured container.

        Returns:
            str: the raw XML enumeration document returned by the service
        """
        url = f"{self.config.account_url}/{self.config.container}?restype=container&comp=list"
        headers = self.list_headers(rfc1123_now())

        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.get(url, headers=headers)

        if not response.is_success:
            logger.error(f"Error listing blobs in {self.config.container}: {response.status_code}")
            raise BlobStorageRequestError(response.status_code, response.text)

        logger.info(f"Listed blobs in container {self.config.container}")
        return response.text

    def get_blob_url(self, blob_name: str) -> str:
        """Plain blob URL; no shared access signature is attached."""
        return f"{self.config.account_url}/{self.config.container}/{quote(blob_name, safe='/')}"
