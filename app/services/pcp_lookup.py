"""Primary care physician contact lookup through the AI gateway.

Lookups are debounced per requester so that a form firing on every keystroke
only reaches the gateway once the user pauses typing.
"""

import asyncio
import itertools
import json
import logging
import re
from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable, TypeVar

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

PROMPT_VERSION = "1.0.0"

SYSTEM_PROMPT = """You are a medical office assistant that helps look up doctor contact information.
When given a doctor's name, provide their likely phone number and fax number if you have reliable information.
Be conservative and only provide information if you're reasonably confident it's accurate.
If you cannot find reliable contact information, indicate that clearly.

Only return real, verified contact information from your training data. Do not make up phone or fax numbers.
If you're not confident about the information, return empty strings for the fields you're unsure about."""

USER_PROMPT = """Please look up the contact information for this Primary Care Physician:
Doctor Name: {doctor_name}
{location_line}
If you cannot find reliable information for this doctor, return empty strings with low confidence
and a note saying verified contact information could not be found."""

TOOL_NAME = "provide_doctor_contact"

CONTACT_TOOL = {
    "type": "function",
    "function": {
        "name": TOOL_NAME,
        "description": "Provide the doctor's contact information",
        "parameters": {
            "type": "object",
            "properties": {
                "phone": {"type": "string", "description": "Doctor's office phone number"},
                "fax": {"type": "string", "description": "Doctor's office fax number"},
                "address": {"type": "string", "description": "Doctor's office address"},
                "confidence": {
                    "type": "string",
                    "enum": ["high", "medium", "low"],
                    "description": "Confidence level in the information",
                },
                "note": {"type": "string", "description": "Any relevant notes"},
            },
            "required": ["phone", "fax", "address", "confidence", "note"],
            "additionalProperties": False,
        },
    },
}

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class PCPLookupError(Exception):
    """Raised when a lookup cannot be answered.

    Carries the HTTP status the caller should answer with.
    """

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class LookupSuperseded(Exception):
    """Raised when a newer lookup from the same requester replaced this one."""

    pass


@dataclass(frozen=True)
class PCPContact:
    """Contact details returned for a physician."""

    phone: str = ""
    fax: str = ""
    address: str = ""
    confidence: str = "low"
    note: str = ""

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "PCPContact":
        confidence = payload.get("confidence")
        return cls(
            phone=str(payload.get("phone") or ""),
            fax=str(payload.get("fax") or ""),
            address=str(payload.get("address") or ""),
            confidence=confidence if confidence in ("high", "medium", "low") else "low",
            note=str(payload.get("note") or ""),
        )

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


NOT_FOUND = PCPContact(note="Could not retrieve contact information")


def require_doctor_name(doctor_name: str | None) -> str:
    """Return the trimmed name, or raise a 400 lookup error when it is too short."""
    name = (doctor_name or "").strip()
    if len(name) < 2:
        raise PCPLookupError("Doctor name is required", status_code=400)
    return name


class PCPLookupService:
    """Calls an OpenAI-compatible chat completions gateway with a forced tool call."""

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.ai_gateway_api_key
        self.api_url = api_url or settings.ai_gateway_url
        self.model = model or settings.ai_gateway_model
        self.timeout = timeout or settings.ai_gateway_timeout_seconds
        self.transport = transport

    def build_request(self, doctor_name: str, location: str | None = None) -> dict[str, Any]:
        """Build the chat completions request body."""
        location_line = f"Location/Area: {location}\n" if location else ""
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": USER_PROMPT.format(
                        doctor_name=doctor_name,
                        location_line=location_line,
                    ),
                },
            ],
            "tools": [CONTACT_TOOL],
            "tool_choice": {"type": "function", "function": {"name": TOOL_NAME}},
        }

    @staticmethod
    def parse_response(data: dict[str, Any]) -> PCPContact:
        """Extract contact details from a chat completions response.

        Prefers the forced tool call. Falls back to a JSON object embedded in
        the message content, then to a low-confidence empty result.
        """
        choices = data.get("choices") or []
        message = choices[0].get("message", {}) if choices else {}

        tool_calls = message.get("tool_calls") or []
        if tool_calls:
            arguments = tool_calls[0].get("function", {}).get("arguments")
            if arguments:
                try:
                    return PCPContact.from_payload(json.loads(arguments))
                except (ValueError, AttributeError) as e:
                    logger.error(f"Failed to parse tool call arguments: {e}")

        content = message.get("content")
        if content:
            match = _JSON_OBJECT.search(content)
            if match:
                try:
                    return PCPContact.from_payload(json.loads(match.group(0)))
                except (ValueError, AttributeError) as e:
                    logger.error(f"Failed to parse AI response: {e}")

        return NOT_FOUND

    async def lookup(self, doctor_name: str, location: str | None = None) -> PCPContact:
        """Look up a physician's office contact details.

        Raises:
            PCPLookupError: On validation, configuration or gateway failure
        """
        doctor_name = require_doctor_name(doctor_name)

        if not self.api_key:
            raise PCPLookupError("AI_GATEWAY_API_KEY is not configured")

        body = self.build_request(doctor_name, (location or "").strip() or None)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.post(
                    self.api_url,
                    json=body,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.HTTPError as e:
            logger.error(f"AI gateway request failed: {e}")
            raise PCPLookupError("AI lookup failed") from e

        if response.status_code == 429:
            raise PCPLookupError("Rate limit exceeded, please try again later.", status_code=429)
        if response.status_code == 402:
            raise PCPLookupError("AI service unavailable.", status_code=402)
        if not response.is_success:
            logger.error(f"AI gateway error: {response.status_code} {response.text}")
            raise PCPLookupError("AI lookup failed")

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"AI gateway returned invalid JSON: {e}")
            raise PCPLookupError("AI lookup failed") from e

        contact = self.parse_response(data)
        logger.info(
            f"PCP lookup completed with {contact.confidence} confidence "
            f"(model={self.model}, prompt_version={PROMPT_VERSION})"
        )
        return contact


class DebouncedLookup:
    """Trailing-edge debounce keyed by requester.

    Each call registers itself as the latest for its key and waits the
    interval. Only a call still registered as latest after the wait runs.
    Earlier calls raise LookupSuperseded. Calls already past the wait are
    never interrupted.
    """

    def __init__(self, interval: float | None = None):
        self.interval = settings.pcp_lookup_debounce_seconds if interval is None else interval
        self._sequence = itertools.count(1)
        self._latest: dict[str, int] = {}

    def is_pending(self, key: str) -> bool:
        return key in self._latest

    def cancel(self, key: str) -> None:
        """Drop the pending call for ``key`` so its timer does not fire."""
        self._latest.pop(key, None)

    async def run(self, key: str, call: Callable[[], Awaitable[T]]) -> T:
        ticket = next(self._sequence)
        self._latest[key] = ticket

        try:
            await asyncio.sleep(self.interval)
        except asyncio.CancelledError:
            if self._latest.get(key) == ticket:
                del self._latest[key]
            raise

        if self._latest.get(key) != ticket:
            logger.debug(f"Lookup {ticket} for {key} superseded")
            raise LookupSuperseded()

        del self._latest[key]
        return await call()


pcp_debouncer = DebouncedLookup()


def get_pcp_lookup_service() -> PCPLookupService:
    """Dependency returning the configured lookup service."""
    return PCPLookupService()


def get_pcp_debouncer() -> DebouncedLookup:
    """Dependency returning the process-wide debounce registry."""
    return pcp_debouncer
