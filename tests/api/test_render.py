"""Unit tests for src/api/render.py"""

import re

from src.api.models import ButtonSpec, ScreenDescriptor
from src.api.render import render
from src.core.shared_types import ButtonKind


def _meta(html: str) -> dict[str, str]:
    return dict(re.findall(r'<meta property="([^"]+)" content="([^"]*)" />', html))


def test_render_frame_tags() -> None:
    screen = ScreenDescriptor(
        title="Connect Wallet",
        image="https://frame.test/images/connect.png",
        buttons=[
            ButtonSpec(label="Base", kind=ButtonKind.EXTERNAL_LINK, target="https://wallet.test/"),
            ButtonSpec(label="Back"),
        ],
        post_url="https://frame.test/",
    )
    html = render(screen)
    assert html.startswith("<!DOCTYPE html>")
    tags = _meta(html)
    assert tags == {
        "fc:frame": "vNext",
        "og:title": "Connect Wallet",
        "og:image": "https://frame.test/images/connect.png",
        "fc:frame:image": "https://frame.test/images/connect.png",
        "fc:frame:button:1": "Base",
        "fc:frame:button:1:action": "link",
        "fc:frame:button:1:target": "https://wallet.test/",
        "fc:frame:button:2": "Back",
        "fc:frame:post_url": "https://frame.test/",
    }


def test_post_buttons_have_no_action_tag() -> None:
    screen = ScreenDescriptor(
        title="Choose",
        image="https://frame.test/i.png",
        buttons=[ButtonSpec(label="Rock"), ButtonSpec(label="Paper")],
        post_url="https://frame.test/bot",
    )
    tags = _meta(render(screen))
    assert "fc:frame:button:1:action" not in tags
    assert "fc:frame:button:3" not in tags


def test_values_are_escaped() -> None:
    screen = ScreenDescriptor(
        title='Say "hi" <b>',
        image="https://frame.test/i.png",
        buttons=[],
        post_url="https://frame.test/pvp?matchId=a&x=1",
    )
    html = render(screen)
    assert "&quot;hi&quot; &lt;b&gt;" in html
    assert "matchId=a&amp;x=1" in html
    assert "<b>" not in html
