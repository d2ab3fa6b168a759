"""
Turn an inbound signed callback into a trusted action.

The signature itself is checked by an external validation service (Neynar hub API by default).
Whatever this module returns is the only input the session service ever reads: identity, button and callback URL
never come from any other part of the request.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol
from urllib.parse import parse_qsl, urlsplit

import requests
from pydantic import ValidationError

from src.api.models import FrameActionPayload
from src.core.exceptions import InvalidSignatureError, MissingSignatureError

logger = logging.getLogger(__name__)

VALIDATE_PATH = "/v2/farcaster/frame/validate"


@dataclass(frozen=True)
class VerifiedAction:
    identity: int
    button_index: int
    query: Mapping[str, str] = field(default_factory=dict)


class FrameValidationClient(Protocol):
    """Black box checking a signed frame message. Returns the validation result as a JSON-like dict."""

    def validate_frame_action(self, message_bytes_hex: str) -> dict[str, Any]: ...


class NeynarClient:
    """Validation through the Neynar hub API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.neynar.com",
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def validate_frame_action(self, message_bytes_hex: str) -> dict[str, Any]:
        response = self.session.post(
            f"{self.base_url}{VALIDATE_PATH}",
            json={"message_bytes_in_hex": message_bytes_hex},
            headers={
                "accept": "application/json",
                "api_key": self.api_key,
                "x-neynar-experimental": "true",
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        decoded = response.json()
        if not isinstance(decoded, dict):
            return {}
        return decoded


def parse_body(raw_body: bytes) -> dict[str, Any]:
    """
    Callbacks arrive as JSON, but some clients post them form-encoded.
    Form keys use the bracket notation (trustedData[messageBytes]=...).
    Anything unreadable gives an empty dict, which then fails as a missing signature.
    """
    if not raw_body:
        return {}
    text = raw_body.decode("utf-8", errors="replace")
    try:
        decoded = json.loads(text)
    except json.JSONDecodeError:
        decoded = None
    if isinstance(decoded, dict):
        return decoded

    data: dict[str, Any] = {}
    for key, value in parse_qsl(text, keep_blank_values=True):
        if "[" in key and key.endswith("]"):
            outer, inner = key[:-1].split("[", 1)
            nested = data.setdefault(outer, {})
            if isinstance(nested, dict):
                nested[inner] = value
        else:
            data[key] = value
    return data


def query_from_url(url: str) -> dict[str, str]:
    """Flat mapping of the query parameters of a URL (last value wins for repeated keys)."""
    return dict(parse_qsl(urlsplit(url).query))


class ActionVerifier:
    """Verified Action Adapter: raw callback body in, VerifiedAction out (or a VerificationError)."""

    def __init__(self, client: FrameValidationClient) -> None:
        self.client = client

    def verify(self, raw_body: bytes) -> VerifiedAction:
        try:
            payload = FrameActionPayload.model_validate(parse_body(raw_body))
        except ValidationError:
            payload = FrameActionPayload()
        message_bytes = payload.message_bytes
        if not message_bytes:
            logger.warning("Rejected callback without messageBytes")
            raise MissingSignatureError("Missing messageBytes")

        try:
            validation = self.client.validate_frame_action(message_bytes)
        except requests.RequestException as exc:
            logger.warning("Frame validation request failed: %s", exc)
            raise InvalidSignatureError("Verification error") from exc

        action = validation.get("action")
        if not validation.get("valid") or not action:
            logger.warning("Rejected callback with an invalid signature")
            raise InvalidSignatureError("Invalid signature")

        try:
            verified = VerifiedAction(
                identity=int(action["interactor"]["fid"]),
                button_index=int(action["tapped_button"]["index"]),
                query=query_from_url(str(action.get("url") or "")),
            )
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Unreadable validated action: %s", exc)
            raise InvalidSignatureError("Verification error") from exc

        logger.debug(
            "Verified action fid=%s button=%s query=%s",
            verified.identity,
            verified.button_index,
            dict(verified.query),
        )
        return verified
