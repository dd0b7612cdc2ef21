from typing import Any

import httpx

from ocr_app.logging.logger import Log
from ocr_app.recognition.base import BaseRecognitionClient
from ocr_app.recognition.exceptions import RecognitionFailedError, RecognitionNetworkError


class OcrSpaceClientAdapter(BaseRecognitionClient):
    """Recognition client for the OCR.space parse/image endpoint.

    One form POST per call. No retry: failures surface to the caller at once.
    """

    LANGUAGE = "eng"

    def __init__(
        self,
        *,
        api_url: str,
        api_key: str,
        timeout_seconds: int,
        client: httpx.Client | None = None,
    ) -> None:
        self._api_url = api_url
        self._api_key = api_key
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=timeout_seconds)

    def recognize(self, image_url: str) -> str:
        Log.info("Sending image to recognition service", image_url=image_url)
        form = {
            "apikey": self._api_key,
            "url": image_url,
            "language": self.LANGUAGE,
            "isOverlayRequired": "false",
        }
        try:
            response = self._client.post(self._api_url, data=form)
        except httpx.HTTPError as exc:
            raise RecognitionNetworkError(f"OCR provider network error: {exc}") from exc

        payload = self._parse_body(response)
        parsed_results = payload.get("ParsedResults") or []
        if not isinstance(parsed_results, list) or not parsed_results:
            raise RecognitionFailedError(self._failure_message(payload))

        first = parsed_results[0]
        text = (first.get("ParsedText") or "") if isinstance(first, dict) else None
        if not isinstance(text, str):
            raise RecognitionFailedError(
                "Failed to extract text from image: unexpected response shape"
            )
        Log.info("Recognition succeeded", chars=len(text))
        return text

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _parse_body(self, response: httpx.Response) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise RecognitionFailedError(
                f"Failed to extract text from image: invalid response "
                f"(HTTP {response.status_code})"
            ) from exc
        if not isinstance(payload, dict):
            raise RecognitionFailedError(
                "Failed to extract text from image: unexpected response shape"
            )
        return payload

    def _failure_message(self, payload: dict[str, Any]) -> str:
        message = "Failed to extract text from image"
        detail = payload.get("ErrorMessage")
        if isinstance(detail, list):
            detail = "; ".join(str(part) for part in detail if part)
        if detail:
            return f"{message}: {detail}"
        return message
