import asyncio
from types import MappingProxyType

import pytest

from post_mailer.models import Member, Newsletter, Post
from post_mailer.render import (
    UNSUBSCRIBE_PLACEHOLDER,
    ensure_unsubscribe,
    render_email_for_segment,
    render_for_recipient,
    serialize,
)


SEGMENTED_HTML = (
    'hello<div data-gh-segment="status:free"> free users!</div>'
    '<div data-gh-segment="status:-free"> paid users!</div>'
)
GATED_HTML = "<p>Free content</p><!--members-only--><p>Members content</p>"


def _gated_email(visibility):
    return {
        "post": {"status": "published", "visibility": visibility},
        "html": GATED_HTML,
        "plaintext": "Free content. Members content",
    }


class TestRenderEmailForSegment:
    def test_email_without_segments_is_unchanged(self):
        email = {"otherProperty": True, "html": "<div>test</div>", "plaintext": "test"}

        output = render_email_for_segment(email, "status:free")

        assert set(output) == {"html", "plaintext", "otherProperty"}
        assert output["html"] == "<div>test</div>"
        assert output["plaintext"] == "test"
        assert output["otherProperty"] is True

    def test_hides_non_matching_segments(self):
        email = MappingProxyType({"otherProperty": True, "html": SEGMENTED_HTML, "plaintext": "test"})

        output = render_email_for_segment(email, "status:free")
        assert set(output) == {"html", "plaintext", "otherProperty"}
        assert output["html"] == "hello<div> free users!</div>"
        assert output["plaintext"] == "hello free users!"

        output = render_email_for_segment(email, "status:-free")
        assert output["html"] == "hello<div> paid users!</div>"
        assert output["plaintext"] == "hello paid users!"
        assert email["html"] == SEGMENTED_HTML

    def test_hides_all_segments_without_a_segment(self):
        email = {"otherProperty": True, "html": SEGMENTED_HTML, "plaintext": "test"}

        output = render_email_for_segment(email, None)
        assert output["html"] == "hello"
        assert output["plaintext"] == "hello"

    @pytest.mark.parametrize("visibility", ["paid", "tiers"])
    def test_paywall_for_free_members(self, settings, post_url, paywall_enabled, visibility):
        post_url("https://site.com/blah/")

        output = render_email_for_segment(_gated_email(visibility), "status:free")

        assert "<p>Free content</p>" in output["html"]
        assert "Subscribe to" in output["html"]
        assert "https://site.com/blah/#/portal/signup" in output["html"]
        assert "<p>Members content</p>" not in output["html"]

        assert "Free content" in output["plaintext"]
        assert "Subscribe to" in output["plaintext"]
        assert "https://site.com/blah/#/portal/signup" in output["plaintext"]
        assert "Members content" not in output["plaintext"]

    @pytest.mark.parametrize("visibility", ["paid", "tiers"])
    def test_full_content_for_paid_members(self, settings, post_url, paywall_enabled, visibility):
        post_url("https://site.com/blah/")

        output = render_email_for_segment(_gated_email(visibility), "status:-free")

        assert output["html"] == GATED_HTML
        assert output["plaintext"] == "Free content\n\nMembers content"

    @pytest.mark.parametrize("segment", ["status:free", "status:-free"])
    def test_full_content_on_public_posts(self, settings, post_url, paywall_enabled, segment):
        post_url("https://site.com/blah/")

        output = render_email_for_segment(_gated_email("public"), segment)

        assert output["html"] == GATED_HTML
        assert output["plaintext"] == "Free content\n\nMembers content"

    @pytest.mark.parametrize("segment", ["status:free", "status:-free"])
    def test_missing_post_does_not_crash(self, paywall_enabled, segment):
        email = {"html": GATED_HTML, "plaintext": "Free content. Members content"}

        output = render_email_for_segment(email, segment)

        assert output["html"] == GATED_HTML
        assert output["plaintext"] == "Free content\n\nMembers content"

    def test_paywall_needs_the_labs_flag(self, settings, post_url, monkeypatch):
        from post_mailer import services
        monkeypatch.setattr(services.labs, "is_set", lambda flag: False)
        post_url("https://site.com/blah/")

        output = render_email_for_segment(_gated_email("paid"), "status:free")

        assert output["html"] == GATED_HTML

    def test_paywall_keeps_content_after_post_end(self, settings, post_url, paywall_enabled):
        post_url("https://site.com/blah/")
        email = _gated_email("paid")
        email["html"] = GATED_HTML + "<!-- POST CONTENT END --><p>Footer</p>"

        output = render_email_for_segment(email, "status:free")

        assert output["html"].endswith("<!-- POST CONTENT END --><p>Footer</p>")
        assert "Members content" not in output["html"]


class TestRecipientRendering:
    def test_ensure_unsubscribe_is_idempotent(self):
        email = {"html": "<html><body><p>Hi</p></body></html>", "plaintext": "Hi", "subject": "s"}

        once = ensure_unsubscribe(email)

        assert UNSUBSCRIBE_PLACEHOLDER in once["html"]
        assert once["html"].index(UNSUBSCRIBE_PLACEHOLDER) < once["html"].lower().rindex("</body>")
        assert once["plaintext"] == "Hi\n\nUnsubscribe: {{ unsubscribe_url }}"
        assert once["subject"] == "s"
        assert ensure_unsubscribe(once) == once
        assert email["plaintext"] == "Hi"

    def test_ensure_unsubscribe_without_body(self):
        once = ensure_unsubscribe({"html": "<p>Hi</p>"})
        assert once["html"].endswith("</table>\n")
        assert once["plaintext"] == "Unsubscribe: {{ unsubscribe_url }}"

    def test_ensure_unsubscribe_keeps_existing_plaintext_link(self):
        email = {"html": "", "plaintext": "Bye [{{ unsubscribe_url }}]"}
        assert ensure_unsubscribe(email)["plaintext"] == "Bye [{{ unsubscribe_url }}]"

    def test_render_for_recipient_adds_plaintext_unsubscribe_line(self, site_url):
        site_url("https://site.com/")
        member = Member(uuid="m1", email="jamie@example.com", name="Jamie")

        output = render_for_recipient({"html": "<p>Hi</p>", "plaintext": "Hey %%{first_name}%%"}, member)

        assert output["plaintext"] == "Hey Jamie\n\nUnsubscribe: https://site.com/unsubscribe/?uuid=m1"

    def test_render_for_recipient(self, site_url):
        site_url("https://site.com/")
        member = Member(uuid="m1", email="jamie@example.com", name="Jamie Larson")
        email = {
            "html": "<p>Hey %%{first_name}%%</p>",
            "plaintext": "Hey %%{first_name}%%\n\nUnsubscribe [{{ unsubscribe_url }}]",
        }

        output = render_for_recipient(email, member, newsletter_uuid="n1")

        assert "Hey Jamie" in output["html"]
        assert 'href="https://site.com/unsubscribe/?uuid=m1&amp;newsletter=n1"' in output["html"]
        assert output["plaintext"] == (
            "Hey Jamie\n\nUnsubscribe [https://site.com/unsubscribe/?uuid=m1&newsletter=n1]"
        )


class TestSerialize:
    @pytest.fixture
    def post(self):
        return Post(
            id="p1",
            uuid="post-uuid",
            title="Weekly <Digest>",
            status="published",
            visibility="paid",
            html=GATED_HTML,
        )

    @pytest.fixture
    def newsletter(self):
        return Newsletter(uuid="n1", name="The Weekly", footer_content="<em>Thanks for reading</em>")

    def test_serialize_for_sending(self, settings, site_url, post_url, post, newsletter):
        site_url("https://site.com/")
        post_url("https://site.com/weekly/")

        email = asyncio.run(serialize(post, newsletter))

        assert email["subject"] == "Weekly <Digest>"
        assert email["post"] is post
        assert "Weekly &lt;Digest&gt;" in email["html"]
        assert "<!-- POST CONTENT START -->" in email["html"]
        assert "<!-- POST CONTENT END -->" in email["html"]
        assert GATED_HTML in email["html"]
        assert UNSUBSCRIBE_PLACEHOLDER in email["html"]
        assert "<em>Thanks for reading</em>" in email["html"]
        assert "The Weekly" in email["html"]
        assert "Members content" in email["plaintext"]

    def test_serialize_preview_links_to_preview_unsubscribe(self, settings, site_url, post_url, post, newsletter):
        site_url("https://site.com/")
        post_url("https://site.com/weekly/")

        email = asyncio.run(serialize(post, newsletter, is_browser_preview=True))

        assert "https://site.com/unsubscribe/?preview=1" in email["html"]
        assert UNSUBSCRIBE_PLACEHOLDER not in email["html"]

    def test_serialized_email_through_the_paywall(
        self, settings, site_url, post_url, paywall_enabled, post, newsletter
    ):
        site_url("https://site.com/")
        post_url("https://site.com/weekly/")
        email = asyncio.run(serialize(post, newsletter))

        free = render_email_for_segment(email, "status:free")
        paid = render_email_for_segment(email, "status:-free")

        assert "Members content" not in free["html"]
        assert "Subscribe to" in free["html"]
        assert "Thanks for reading" in free["html"]
        assert "https://site.com/weekly/#/portal/signup" in free["plaintext"]
        assert "Members content" in paid["html"]

        member = Member(uuid="m1", email="a@example.com", name="Ana", status="free")
        sent = render_for_recipient(free, member)
        assert "https://site.com/unsubscribe/?uuid=m1" in sent["html"]
        assert "https://site.com/unsubscribe/?uuid=m1" in sent["plaintext"]
        assert UNSUBSCRIBE_PLACEHOLDER not in sent["html"]


def test_member_segment_and_first_name():
    assert Member(uuid="a", email="a@x.com", name="Jamie Larson").first_name == "Jamie"
    assert Member(uuid="a", email="a@x.com").first_name == ""
    assert Member(uuid="a", email="a@x.com", name="  Jamie Larson").first_name == "Jamie"
    assert Member(uuid="a", email="a@x.com", name="Jamie\tLarson").first_name == "Jamie"
    assert Member(uuid="a", email="a@x.com", name="Jamie\nLarson").first_name == "Jamie"
    assert Member(uuid="a", email="a@x.com", name="   ").first_name == ""
    assert Member(uuid="a", email="a@x.com", status="free").segment == "status:free"
    assert Member(uuid="a", email="a@x.com", status="paid").segment == "status:-free"
