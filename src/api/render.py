"""
Render a screen descriptor into the HTML document a frame client reads.

Only the meta-tags matter: the client shows og:image with up to 4 buttons, and sends the next tap to fc:frame:post_url.
"""

from html import escape

from src.api.models import ButtonSpec, ScreenDescriptor
from src.core.shared_types import ButtonKind

FRAME_VERSION = "vNext"

# Wire value of the button action for each kind. Post is the protocol default and is left implicit.
BUTTON_ACTIONS: dict[ButtonKind, str] = {
    ButtonKind.EXTERNAL_LINK: "link",
}


def _meta(prop: str, content: str) -> str:
    return f'<meta property="{escape(prop)}" content="{escape(content)}" />'


def _button_tags(position: int, button: ButtonSpec) -> list[str]:
    prefix = f"fc:frame:button:{position}"
    tags = [_meta(prefix, button.label)]
    action = BUTTON_ACTIONS.get(button.kind)
    if action:
        tags.append(_meta(f"{prefix}:action", action))
    if button.target:
        tags.append(_meta(f"{prefix}:target", button.target))
    return tags


def render(screen: ScreenDescriptor) -> str:
    tags = [
        _meta("fc:frame", FRAME_VERSION),
        _meta("og:title", screen.title),
        _meta("og:image", screen.image),
        _meta("fc:frame:image", screen.image),
    ]
    for position, button in enumerate(screen.buttons, start=1):
        tags.extend(_button_tags(position, button))
    tags.append(_meta("fc:frame:post_url", screen.post_url))

    head = "\n".join(f"  {tag}" for tag in tags)
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n"
        f"  <title>{escape(screen.title)}</title>\n"
        f"{head}\n"
        "</head>\n<body></body>\n</html>\n"
    )
