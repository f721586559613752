"""
SnapShare Backend: ImageKit Object Store
==========================================

What:  ObjectStore backed by the ImageKit media CDN.
How:   Talks to ImageKit's REST API with a long-lived httpx.AsyncClient:
           upload: POST {upload_url}   multipart (file, fileName, folder)
           delete: DELETE {api_url}/files/{fileId}
       Both authenticate with HTTP basic auth, private key as the username
       and an empty password.
Who:   Built once in the app lifespan from settings; injected into the
       pipeline per request.

Failure mapping:
    httpx.TimeoutException       → UploadFailedError ("timed out")
    httpx.HTTPError (transport)  → UploadFailedError
    non-2xx response             → UploadFailedError with ImageKit's message
    2xx without url / fileId     → UploadFailedError
"""

import logging
from typing import Any, Dict, Optional

import httpx

from snapshare.exceptions import UploadFailedError
from snapshare.services.object_store import ObjectStore, UploadResult

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    """ImageKit errors are JSON `{"message": ...}`; fall back to the status line."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return f"HTTP {response.status_code} {response.reason_phrase}".strip()


class ImageKitObjectStore(ObjectStore):
    """
    Args:
        private_key: ImageKit private API key
        upload_url:  Upload endpoint
        api_url:     Management API base (used for delete)
        folder:      Destination folder for uploads
        timeout:     Seconds per HTTP call
        client:      Pre-built client (tests pass one with httpx.MockTransport)
    """

    def __init__(
        self,
        private_key: str,
        upload_url: str = "https://upload.imagekit.io/api/v1/files/upload",
        api_url: str = "https://api.imagekit.io/v1",
        folder: str = "/posts",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.upload_url = upload_url
        self.api_url = api_url.rstrip("/")
        self.folder = folder
        self._auth = httpx.BasicAuth(private_key, "")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def upload(self, content: bytes, file_name: str, content_type: str) -> UploadResult:
        data: Dict[str, Any] = {
            "fileName": file_name,
            "folder": self.folder,
            "useUniqueFileName": "false",
        }
        files = {"file": (file_name, content, content_type)}

        try:
            response = await self._client.post(
                self.upload_url, data=data, files=files, auth=self._auth
            )
        except httpx.TimeoutException as e:
            logger.error("ImageKit upload timed out for %s: %s", file_name, e)
            raise UploadFailedError(
                message="Failed to upload image to storage: the request timed out",
                context={"file_name": file_name, "error": type(e).__name__},
            ) from e
        except httpx.HTTPError as e:
            logger.error("ImageKit upload failed for %s: %s", file_name, e)
            raise UploadFailedError(
                message=f"Failed to upload image to storage: {e}",
                context={"file_name": file_name, "error": type(e).__name__},
            ) from e

        if response.is_error:
            reason = _error_message(response)
            logger.error(
                "ImageKit rejected upload %s: %d %s", file_name, response.status_code, reason
            )
            raise UploadFailedError(
                message=f"Failed to upload image to storage: {reason}",
                context={"file_name": file_name, "status": response.status_code},
            )

        try:
            payload = response.json()
            url, file_id = payload["url"], payload["fileId"]
        except (ValueError, KeyError, TypeError) as e:
            logger.error("Unexpected ImageKit upload response for %s", file_name)
            raise UploadFailedError(
                message="Failed to upload image to storage: unexpected response",
                context={"file_name": file_name, "status": response.status_code},
            ) from e

        logger.info("Uploaded %s to ImageKit (%d bytes) as %s", file_name, len(content), file_id)
        return UploadResult(url=url, external_id=file_id)

    async def delete(self, external_id: str) -> None:
        try:
            response = await self._client.delete(
                f"{self.api_url}/files/{external_id}", auth=self._auth
            )
        except httpx.HTTPError as e:
            raise UploadFailedError(
                message=f"Failed to delete image from storage: {e}",
                context={"external_id": external_id},
            ) from e

        if response.is_error and response.status_code != 404:
            raise UploadFailedError(
                message=f"Failed to delete image from storage: {_error_message(response)}",
                context={"external_id": external_id, "status": response.status_code},
            )
        logger.info("Deleted ImageKit file %s", external_id)

    async def aclose(self) -> None:
        await self._client.aclose()
