"""Requests and Response models"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.core.exceptions import ScreenError
from src.core.shared_types import ButtonKind

# Protocol ceiling on the number of buttons per frame
MAX_BUTTONS = 4


# --- REQUEST MODELS ---
class TrustedData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message_bytes: Optional[str] = Field(default=None, alias="messageBytes")


class FrameActionPayload(BaseModel):
    """
    Body of a button tap callback.

    NOTE: the untrustedData part of the body is deliberately not modelled. Identity, button and URL are only ever
    read from the verified result of trustedData.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    trusted_data: Optional[TrustedData] = Field(default=None, alias="trustedData")

    @property
    def message_bytes(self) -> Optional[str]:
        if self.trusted_data is None:
            return None
        return self.trusted_data.message_bytes or None


# --- RESPONSE MODELS ---
class ButtonSpec(BaseModel):
    label: str
    kind: ButtonKind = ButtonKind.POST
    target: Optional[str] = None

    @model_validator(mode="after")
    def validate_link_target(self) -> "ButtonSpec":
        if self.kind == ButtonKind.EXTERNAL_LINK and not self.target:
            raise ScreenError(f"External link button {self.label!r} needs a target URL.")
        return self


class ScreenDescriptor(BaseModel):
    """Everything needed to render one frame. post_url receives the next tap on any post button."""

    title: str
    image: str
    buttons: list[ButtonSpec]
    post_url: str

    @field_validator("buttons")
    @classmethod
    def validate_button_count(cls, value: list[ButtonSpec]) -> list[ButtonSpec]:
        if len(value) > MAX_BUTTONS:
            raise ScreenError(
                f"A frame holds at most {MAX_BUTTONS} buttons, got {len(value)}."
            )
        return value

    @property
    def labels(self) -> list[str]:
        return [button.label for button in self.buttons]
