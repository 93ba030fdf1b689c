from __future__ import annotations
import asyncio
from flask import Flask, jsonify, request

from . import config, services
from .render import render_email_for_segment, serialize
from .replacements import apply_replacements


app = Flask(__name__)


# Browser preview of a post email; deploy behind the admin proxy (gunicorn + nginx)


def _segment_for_request() -> str | None:
    segment = (request.args.get("memberSegment") or "").strip()
    return segment or None


@app.get("/email_previews/posts/<post_id>/")
def email_preview(post_id: str):
    try:
        post = services.posts.get(post_id)
        newsletter = services.get_newsletter(request.args.get("newsletter"))
    except (services.PostNotFoundError, services.NewsletterNotFoundError) as e:
        return jsonify(error=str(e)), 404

    segment = _segment_for_request()
    try:
        email = asyncio.run(serialize(post, newsletter, is_browser_preview=True))
        email = render_email_for_segment(email, segment)
        # Previews show fallbacks where a member's values would go.
        email = apply_replacements(email, {})
    except Exception as e:
        app.logger.exception("Unable to render preview for post %s: %s", post_id, e)
        return jsonify(error="Unable to render email preview."), 500

    app.logger.info("Rendered preview for post %s (segment=%s)", post_id, segment)
    return jsonify(subject=email["subject"], html=email["html"], plaintext=email["plaintext"])


@app.get("/healthz")
def healthz():
    return "ok", 200


if __name__ == "__main__":
    app.run(host=config.PREVIEW_HOST, port=config.PREVIEW_PORT, debug=config.PREVIEW_DEBUG)
