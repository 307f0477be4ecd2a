"""Minimal Uploadthing API client for instructor photo uploads."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, cast

import httpx
from pydantic import SecretStr

logger = logging.getLogger(__name__)


class UploadthingError(RuntimeError):
    """Raised when the Uploadthing API responds with an error."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UploadthingClient:
    """Thin client for the Uploadthing v6 REST API."""

    def __init__(
        self,
        *,
        api_key: str | SecretStr,
        base_url: str = "https://api.uploadthing.com",
        timeout: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        secret_value = api_key.get_secret_value() if isinstance(api_key, SecretStr) else api_key
        if not secret_value:
            raise ValueError("Uploadthing API key must be provided")

        self._api_key = secret_value
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def prepare_upload(
        self,
        *,
        name: str,
        size: int,
        content_type: str,
        acl: str = "public-read",
    ) -> Dict[str, Any]:
        """
        Request a presigned upload for one file.

        Returns:
            The single file entry of the response: key, url, fields, fileUrl
        """
        body = {
            "files": [{"name": name, "size": size, "type": content_type}],
            "acl": acl,
            "contentDisposition": "inline",
        }
        payload = self.request("POST", "/v6/uploadFiles", json_body=body)
        entries = cast(List[Dict[str, Any]], payload.get("data") or [])
        if not entries:
            raise UploadthingError("Uploadthing returned no upload target")
        return entries[0]

    def delete_files(self, file_keys: List[str]) -> Dict[str, Any]:
        return self.request("POST", "/v6/deleteFiles", json_body={"fileKeys": file_keys})

    def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Dict[str, Any] | None = None,
    ) -> Dict[str, Any]:
        """Perform a raw Uploadthing API request and return the parsed JSON payload."""

        url = f"{self._base_url}{path}"
        with httpx.Client(
            timeout=self._timeout,
            transport=self._transport,
            headers={
                "Accept": "application/json",
                "X-Uploadthing-Api-Key": self._api_key,
            },
        ) as client:
            try:
                response = client.request(method, url, json=json_body)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                logger.error(
                    "Uploadthing API error %s for %s %s: %s",
                    status,
                    method,
                    path,
                    exc.response.text[:500],
                )
                raise UploadthingError(
                    f"Uploadthing API responded with status {status}", status_code=status
                ) from exc
            except httpx.RequestError as exc:
                logger.error("Uploadthing request failure for %s %s: %s", method, path, str(exc))
                raise UploadthingError("Failed to reach Uploadthing API") from exc

        try:
            return cast(Dict[str, Any], response.json())
        except json.JSONDecodeError as exc:
            logger.error("Invalid JSON from Uploadthing for %s %s", method, path)
            raise UploadthingError("Received malformed JSON from Uploadthing") from exc
