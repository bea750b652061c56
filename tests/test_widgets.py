from __future__ import annotations

import asyncio

import httpx

from conftest import ADDRESS, FakeApi, badge_definition, badges_payload, category_payload, profile_payload, scores_payload

from dotpassport import BadgeWidget, CategoryWidget, ProfileWidget, ReputationWidget

XSS = "<script>alert(1)</script>"


def run_async(coro):
    return asyncio.run(coro)


def mount(widget_class, client, document, **config):
    widget = widget_class(
        {"api_key": "test-api-key", "address": ADDRESS, **config},
        client=client,
        document=document,
        prefers_dark=lambda: False,
    )
    run_async(widget.mount("#widget"))
    return widget


def container(document):
    return document.select_one("#widget")


def assert_no_executable_markup(document):
    node = container(document)
    assert node.find("script") is None
    assert "<script>" not in node.decode_contents()
    for tag in node.find_all(True):
        assert not any(attr.startswith("on") for attr in tag.attrs)
        for attr in ("href", "src"):
            assert not str(tag.get(attr, "")).lower().startswith("javascript:")


def test_reputation_limits_categories(client, document):
    mount(ReputationWidget, client, document, max_categories=2)
    items = container(document).select(".dp-category-item")
    assert len(items) == 2
    assert items[0].select_one(".dp-category-title").get_text() == "Longevity"


def test_reputation_compact_mode(client, document):
    mount(ReputationWidget, client, document, compact=True)
    assert container(document).select_one(".dp-compact") is not None


def test_reputation_escapes_category_titles(api: FakeApi, client, document):
    payload = scores_payload()
    payload["categories"]["longevity"]["title"] = XSS
    api.add(f"/widget/reputation/{ADDRESS}", payload)

    mount(ReputationWidget, client, document)

    assert_no_executable_markup(document)
    assert XSS in container(document).get_text()


def test_profile_renders_all_sections(client, document):
    mount(ProfileWidget, client, document)
    node = container(document)
    assert node.select_one(".dp-profile-name").get_text() == "Alice"
    assert node.select_one(".dp-profile-address").get_text() == ADDRESS[:13] + "..."
    assert node.select_one("img.dp-profile-avatar")["src"] == "https://example.com/alice.png"
    assert node.select_one(".dp-profile-bio").get_text() == "Polkadot enthusiast"
    assert [a.get_text() for a in node.select(".dp-social-link")] == ["Twitter", "Github"]
    assert node.select_one(".dp-identity").get_text() == "alice.dot"


def test_profile_display_options(client, document):
    mount(ProfileWidget, client, document, show_bio=False, show_socials=False, show_identities=False)
    node = container(document)
    assert node.select_one(".dp-profile-bio") is None
    assert node.select_one(".dp-profile-socials") is None
    assert node.select_one(".dp-identities") is None


def test_profile_defaults_to_anonymous(api: FakeApi, client, document):
    api.add(f"/widget/profile/{ADDRESS}", profile_payload(displayName=None, avatarUrl=None))
    mount(ProfileWidget, client, document)
    node = container(document)
    assert node.select_one(".dp-profile-name").get_text() == "Anonymous"
    assert node.select_one("img") is None


def test_profile_escapes_untrusted_fields(api: FakeApi, client, document):
    api.add(
        f"/widget/profile/{ADDRESS}",
        profile_payload(
            displayName='"><img src=x onerror=alert(1)>',
            bio=XSS,
            avatarUrl="javascript:alert(1)",
            socialLinks={"twitter": "javascript:alert(1)", "web": "https://example.com/?a=<b>"},
        ),
    )

    mount(ProfileWidget, client, document)

    assert_no_executable_markup(document)
    node = container(document)
    assert node.select_one(".dp-profile-bio").get_text() == XSS
    assert node.select_one("img") is None
    links = node.select(".dp-social-link")
    assert len(links) == 1
    assert links[0]["href"] == "https://example.com/?a=<b>"


def test_badge_grid_respects_max_badges(api: FakeApi, client, document):
    api.add(f"/widget/badge/{ADDRESS}", badges_payload(count=5))
    mount(BadgeWidget, client, document, max_badges=3)
    assert len(container(document).select(".dp-badge-item")) == 3


def test_badge_progress_shows_dates(client, document):
    mount(BadgeWidget, client, document, show_progress=True)
    dates = container(document).select(".dp-badge-date")
    assert [d.get_text() for d in dates] == ["Jan 5, 2025", "Jan 5, 2025"]


def test_badge_empty_collection(api: FakeApi, client, document):
    api.add(f"/widget/badge/{ADDRESS}", badges_payload(count=0))
    mount(BadgeWidget, client, document)
    assert "No badges earned yet" in container(document).get_text()


def test_single_badge_not_earned_shows_locked_definition(api: FakeApi, client, document):
    def route(request: httpx.Request) -> httpx.Response:
        assert request.url.params["badgeKey"] == "early-adopter"
        data = {"address": ADDRESS, "badge": None, "definition": badge_definition(), "earned": False}
        return httpx.Response(200, json={"success": True, "data": data})

    api.add_handler(f"/widget/badge/{ADDRESS}", route)
    mount(BadgeWidget, client, document, badge_key="early-adopter")

    node = container(document)
    assert node.select_one(".dp-badge-not-earned") is not None
    assert node.select_one(".dp-badge-title").get_text() == "Early Adopter"
    assert "Bronze Pioneer" in node.select_one(".dp-badge-requirement").get_text()


def test_single_badge_earned(api: FakeApi, client, document):
    badge = badges_payload(count=1)["badges"][0]
    data = {"address": ADDRESS, "badge": badge, "definition": badge_definition(), "earned": True}
    api.add(f"/widget/badge/{ADDRESS}", data)

    mount(BadgeWidget, client, document, badge_key="badge-0")

    items = container(document).select(".dp-badge-item")
    assert len(items) == 1
    assert items[0]["data-badge"] == "badge-0"


def test_badge_key_change_refetches(api: FakeApi, client, document):
    widget = mount(BadgeWidget, client, document)
    run_async(widget.update(badge_key="badge-0"))
    assert api.count() == 2


def test_category_limits_reasons_and_advice(client, document):
    mount(CategoryWidget, client, document, category_key="longevity")
    node = container(document)
    assert node.select_one(".dp-category-name").get_text() == "Longevity"
    assert len(node.select(".dp-breakdown-item")) == 3
    assert [li.get_text() for li in node.select(".dp-advice li")] == ["Advice 0a", "Advice 0b"]


def test_category_without_definition_uses_key(api: FakeApi, client, document):
    payload = category_payload()
    payload["definition"] = None
    api.add(f"/widget/category/{ADDRESS}", payload)

    mount(CategoryWidget, client, document, category_key="longevity")

    node = container(document)
    assert node.select_one(".dp-category-name").get_text() == "longevity"
    assert node.select_one(".dp-breakdown") is None
    assert node.select_one(".dp-advice") is None


def test_category_escapes_advice(api: FakeApi, client, document):
    payload = category_payload()
    payload["definition"]["reasons"][0]["advices"] = [XSS]
    api.add(f"/widget/category/{ADDRESS}", payload)

    mount(CategoryWidget, client, document, category_key="longevity", show_breakdown=False)

    assert_no_executable_markup(document)
    assert container(document).select_one(".dp-breakdown") is None


def test_error_message_is_escaped(api: FakeApi, client, document):
    api.add(f"/widget/reputation/{ADDRESS}", status=400, body={"success": False, "message": XSS})

    mount(ReputationWidget, client, document)

    assert_no_executable_markup(document)
    assert container(document).select_one(".dp-error-message").get_text() == XSS
