"""
Flask application for the festival review dashboard.
Serves the application detail page and the reviewer actions behind it
(status, notes, flag, scores, exports and file access).
"""

from flask import Flask, Response, render_template, request, redirect, url_for, session, flash, jsonify, send_file, stream_with_context, g
from werkzeug.utils import secure_filename
from dotenv import load_dotenv
import io
import json
import logging
import os
import time
from typing import Optional, Dict, Any, Tuple

import redis
import requests
from yarl import URL

# Load environment variables from .env file (for local development)
load_dotenv()

from auth.supabase_client import get_supabase_client
from review.config import DashboardConfig
from review.crew import CrewSortKey, SortOrder, filter_and_sort_crew
from review.display import (
    build_timeline,
    contact_info,
    country_flag,
    education_info,
    file_status,
    format_date,
    format_file_size,
)
from review.export import export_application_pdf, export_crew_csv
from review.messages import get_message, resolve_language
from review.mutations import ApplicationReview
from review.normalize import normalize_application
from review.schema import ApplicationRecord, FileRef, MutationResult, ReviewStatus
from review.scoring import SCORE_CRITERIA, find_reviewer_score, score_entry_from_form, summarize_scores
from review.stats import genre_distribution, review_status_counts
from review.store import ApplicationNotFoundError, DocumentStore, DocumentStoreError, create_document_store

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = os.environ.get("FLASK_SECRET_KEY", os.urandom(32))
app.config["DASHBOARD"] = DashboardConfig.from_env()
# Tests (or scripts) may set a ready-made store here
app.config["DOCUMENT_STORE"] = None

# slot in URL -> attribute on ApplicationFiles (also the message key)
FILE_SLOTS = {
    "film": "film_file",
    "poster": "poster_file",
    "proof": "proof_file",
}

_stats_cache: Dict[str, Any] = {}
_redis_client: Optional[redis.Redis] = None
STATS_CACHE_KEY = "dashboard_stats"
DOWNLOAD_CHUNK_SIZE = 1024 * 1024


def get_config() -> DashboardConfig:
    return app.config["DASHBOARD"]


def get_store() -> DocumentStore:
    """Document store for this request, scoped to the signed-in reviewer's token."""
    if app.config.get("DOCUMENT_STORE") is not None:
        return app.config["DOCUMENT_STORE"]
    if "store" not in g:
        g.store = create_document_store(get_config(), access_token=session.get("access_token"))
    return g.store


def get_redis_client() -> Optional[redis.Redis]:
    """Return a shared Redis client for caching, or None if unavailable."""
    global _redis_client
    if _redis_client is not None:
        return _redis_client

    redis_url = get_config().redis_url
    if not redis_url:
        return None

    try:
        client = redis.Redis.from_url(redis_url, decode_responses=True)
        client.ping()
        _redis_client = client
        return client
    except redis.RedisError as e:
        logger.warning(f"⚠️ Redis cache unavailable: {e}")
        return None


def invalidate_stats_cache() -> None:
    _stats_cache.clear()
    redis_client = get_redis_client()
    if redis_client:
        try:
            redis_client.delete(STATS_CACHE_KEY)
        except redis.RedisError as e:
            logger.warning(f"⚠️ Redis cache delete failed: {e}")


def get_cached_stats() -> Dict[str, Any]:
    """Dashboard statistics, cached for STATS_TTL_SECONDS (Redis first, then in-process)."""
    ttl = get_config().stats_ttl_seconds
    redis_client = get_redis_client()
    if redis_client:
        try:
            cached_value = redis_client.get(STATS_CACHE_KEY)
            if cached_value:
                return json.loads(cached_value)
        except redis.RedisError as e:
            logger.warning(f"⚠️ Redis cache read failed: {e}")

    now = time.time()
    if _stats_cache and (now - _stats_cache["ts"]) < ttl:
        return _stats_cache["stats"]

    applications = [normalize_document(data, doc_id) for doc_id, data in get_store().list()]
    stats = {
        "genres": [item.model_dump() for item in genre_distribution(applications)],
        "review_status": review_status_counts(applications),
    }
    _stats_cache.update({"ts": now, "stats": stats})
    if redis_client:
        try:
            redis_client.setex(STATS_CACHE_KEY, ttl, json.dumps(stats))
        except redis.RedisError as e:
            logger.warning(f"⚠️ Redis cache write failed: {e}")
    return stats


def current_language() -> str:
    """Language from ?lang= (remembered in the session), else session, else default."""
    requested = request.args.get("lang")
    if requested:
        session["lang"] = resolve_language(requested, get_config().default_language)
    return resolve_language(session.get("lang"), get_config().default_language)


def require_auth():
    """Check if a reviewer is signed in."""
    if "user_id" not in session or not session.get("user_id"):
        return False
    return True


def normalize_document(raw: Dict[str, Any], application_id: str) -> ApplicationRecord:
    """normalize_application, with any failure reported as a load error."""
    try:
        return normalize_application(raw, application_id)
    except (TypeError, ValueError, OverflowError) as e:
        logger.error(f"❌ Could not normalize application {application_id}: {e}")
        raise DocumentStoreError(f"Unreadable application {application_id}: {e}") from e


def load_application(application_id: str) -> ApplicationRecord:
    """Fetch and normalize one application. Raises ApplicationNotFoundError / DocumentStoreError."""
    raw = get_store().get(application_id)
    if raw is None:
        raise ApplicationNotFoundError(application_id)
    return normalize_document(raw, application_id)


def _request_data() -> Optional[Dict[str, Any]]:
    """JSON object body or form fields; None when the JSON body is not an object."""
    if not request.is_json:
        return request.form.to_dict()
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


def _as_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes", "on"}
    return bool(value)


def _mutation_response(result: MutationResult, success_key: str, error_key: str, lang: str, **extra):
    """Turn a MutationResult into the JSON notification the page shows."""
    if result.success:
        return jsonify({"success": True, "message": get_message(success_key, lang), **extra})

    status_code = {"invalid": 400, "not_found": 404}.get(result.error_type, 500)
    return jsonify({
        "success": False,
        "message": get_message(error_key, lang),
        "error": result.error,
    }), status_code


def _review_for(application_id: str) -> Tuple[Optional[ApplicationReview], Optional[Tuple]]:
    """Load the application for a mutation; second item is an error response."""
    lang = current_language()
    try:
        application = load_application(application_id)
    except ApplicationNotFoundError:
        return None, (jsonify({"success": False, "error": get_message("application_not_found", lang)}), 404)
    except DocumentStoreError as e:
        logger.error(f"❌ Error loading application {application_id}: {e}")
        return None, (jsonify({"success": False, "error": get_message("load_error", lang)}), 500)
    return ApplicationReview(get_store(), application), None


@app.route("/")
def index():
    """Most recent applications."""
    if not require_auth():
        return redirect(url_for("login"))

    lang = current_language()
    try:
        applications = [normalize_document(data, doc_id) for doc_id, data in get_store().list(limit=100)]
    except DocumentStoreError as e:
        logger.error(f"❌ Error listing applications: {e}")
        flash(get_message("load_error", lang), "error")
        applications = []

    return render_template(
        "applications.html",
        applications=applications,
        summaries={a.id: summarize_scores(a.scores) for a in applications},
        t=lambda key: get_message(key, lang),
        lang=lang,
        format_date=format_date,
    )


@app.route("/login", methods=["GET", "POST"])
def login():
    """Reviewer sign-in with Supabase email + password."""
    if require_auth():
        return redirect(url_for("index"))

    supabase = get_supabase_client()
    if not supabase:
        flash("Authentication is not configured. Please set SUPABASE_URL and SUPABASE_ANON_KEY.", "error")
        return render_template("login.html")

    if request.method == "POST":
        email = request.form.get("email", "").strip()
        password = request.form.get("password", "").strip()

        if not email or "@" not in email or not password:
            flash("Please enter your email address and password.", "error")
            return render_template("login.html")

        try:
            response = supabase.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            error_msg = str(e)
            logger.warning(f"⚠️ Sign-in failed for {email}: {error_msg}")
            if "invalid" in error_msg.lower() or "credentials" in error_msg.lower():
                flash("Invalid email or password.", "error")
            elif "rate limit" in error_msg.lower():
                flash("Too many requests. Please wait a few minutes.", "error")
            else:
                flash(f"Authentication error: {error_msg}", "error")
            return render_template("login.html")

        if response.user:
            session["user_id"] = response.user.id
            session["user_email"] = response.user.email
            session["access_token"] = response.session.access_token if response.session else None
            session["refresh_token"] = response.session.refresh_token if response.session else None
            flash(f"✅ Welcome back, {response.user.email}!", "success")
            return redirect(request.args.get("next") or url_for("index"))

        flash("Invalid email or password.", "error")

    return render_template("login.html")


@app.route("/logout")
def logout():
    session.clear()
    flash("✅ Logged out successfully!", "success")
    return redirect(url_for("login"))


@app.route("/applications/<application_id>")
def application_detail(application_id):
    """Application detail page: film, contact, crew table, files, timeline and review panel."""
    if not require_auth():
        return redirect(url_for("login", next=request.path))

    lang = current_language()
    t = lambda key: get_message(key, lang)  # noqa: E731

    if not application_id.strip():
        return render_template("error.html", message=t("application_id_missing"), t=t, lang=lang), 404

    try:
        application = load_application(application_id)
    except ApplicationNotFoundError:
        return render_template("error.html", message=t("application_not_found"), t=t, lang=lang), 404
    except DocumentStoreError as e:
        logger.error(f"❌ Error loading application {application_id}: {e}")
        return render_template("error.html", message=t("load_error"), t=t, lang=lang), 500

    query = request.args.get("q", "")
    sort_key = request.args.get("sort", CrewSortKey.NAME.value)
    sort_order = request.args.get("order", SortOrder.ASC.value)
    if sort_key not in {key.value for key in CrewSortKey}:
        sort_key = CrewSortKey.NAME.value
    if sort_order not in {order.value for order in SortOrder}:
        sort_order = SortOrder.ASC.value
    reveal_all = _as_flag(request.args.get("all", ""))

    crew_view = filter_and_sort_crew(application.crew_members, query, sort_key, sort_order, reveal_all)

    files = []
    for slot, attribute in FILE_SLOTS.items():
        file_ref: Optional[FileRef] = getattr(application.files, attribute)
        if file_ref is None:
            continue
        files.append({
            "slot": slot,
            "label": t(attribute),
            "file": file_ref,
            "status": file_status(file_ref),
            "size": format_file_size(file_ref.size),
        })

    return render_template(
        "application_detail.html",
        application=application,
        summary=summarize_scores(application.scores),
        my_score=find_reviewer_score(application.scores, session.get("user_id")),
        crew_view=crew_view,
        crew_query=query,
        crew_sort=sort_key,
        crew_order=sort_order,
        reveal_all=reveal_all,
        contact=contact_info(application),
        education=education_info(application),
        timeline=build_timeline(application),
        files=files,
        statuses=[status.value for status in ReviewStatus],
        score_criteria=SCORE_CRITERIA,
        flag=country_flag(application.nationality),
        format_date=lambda value: format_date(value, lang),
        t=t,
        lang=lang,
    )


def _invalid_body(error_key: str, lang: str):
    return jsonify({
        "success": False,
        "message": get_message(error_key, lang),
        "error": "Request body must be a JSON object or form fields",
    }), 400


@app.route("/applications/<application_id>/status", methods=["POST"])
def update_status(application_id):
    if not require_auth():
        return jsonify({"success": False, "error": "Not authenticated"}), 401

    data = _request_data()
    if data is None:
        return _invalid_body("status_error", current_language())

    review, error_response = _review_for(application_id)
    if error_response:
        return error_response

    result = review.set_review_status(data.get("status", ""))
    if result.success:
        invalidate_stats_cache()
    return _mutation_response(
        result, "status_updated", "status_error", current_language(),
        review_status=review.application.review_status.value,
    )


@app.route("/applications/<application_id>/notes", methods=["POST"])
def update_notes(application_id):
    if not require_auth():
        return jsonify({"success": False, "error": "Not authenticated"}), 401

    data = _request_data()
    if data is None:
        return _invalid_body("notes_error", current_language())

    review, error_response = _review_for(application_id)
    if error_response:
        return error_response

    result = review.set_admin_notes(data.get("notes", ""))
    return _mutation_response(result, "notes_saved", "notes_error", current_language())


@app.route("/applications/<application_id>/flag", methods=["POST"])
def update_flag(application_id):
    if not require_auth():
        return jsonify({"success": False, "error": "Not authenticated"}), 401

    data = _request_data()
    if data is None:
        return _invalid_body("flag_error", current_language())

    review, error_response = _review_for(application_id)
    if error_response:
        return error_response

    flagged = _as_flag(data.get("flagged", False))
    result = review.set_flag(flagged, str(data.get("reason") or "").strip() or None)
    if result.success:
        invalidate_stats_cache()
    return _mutation_response(
        result, "flag_set" if flagged else "flag_cleared", "flag_error", current_language(),
        flagged=review.application.flagged,
        flag_reason=review.application.flag_reason,
    )


@app.route("/applications/<application_id>/scores", methods=["POST"])
def save_scores(application_id):
    """Save the signed-in reviewer's score, replacing their previous one."""
    if not require_auth():
        return jsonify({"success": False, "error": "Not authenticated"}), 401

    lang = current_language()
    data = _request_data()
    if data is None:
        return _invalid_body("scores_error", lang)

    reviewer_id = session["user_id"]
    try:
        entry = score_entry_from_form(data, reviewer_id, session.get("user_email") or reviewer_id)
    except ValueError as e:
        return jsonify({"success": False, "message": get_message("scores_error", lang), "error": str(e)}), 400

    review, error_response = _review_for(application_id)
    if error_response:
        return error_response

    result = review.upsert_score(entry, reviewer_id=reviewer_id)
    summary = summarize_scores(review.application.scores)
    return _mutation_response(
        result, "scores_saved", "scores_error", lang,
        average_score=summary.average_score,
        count=summary.count,
    )


@app.route("/applications/<application_id>/export.pdf")
def export_pdf(application_id):
    """Download the review report as PDF."""
    if not require_auth():
        return redirect(url_for("login"))

    lang = current_language()
    try:
        application = load_application(application_id)
        pdf_bytes = export_application_pdf(application)
    except ApplicationNotFoundError:
        flash(get_message("application_not_found", lang), "error")
        return redirect(url_for("index"))
    except Exception as e:
        logger.error(f"❌ Export failed for {application_id}: {e}", exc_info=True)
        flash(get_message("export_failed", lang), "error")
        return redirect(url_for("application_detail", application_id=application_id))

    safe_title = secure_filename(application.film_title) or application.application_id
    return send_file(
        io.BytesIO(pdf_bytes),
        mimetype="application/pdf",
        as_attachment=True,
        download_name=f"application_{safe_title}.pdf",
    )


@app.route("/applications/<application_id>/crew.csv")
def export_crew(application_id):
    """Download the crew roster as CSV."""
    if not require_auth():
        return redirect(url_for("login"))

    lang = current_language()
    try:
        application = load_application(application_id)
    except ApplicationNotFoundError:
        flash(get_message("application_not_found", lang), "error")
        return redirect(url_for("index"))
    except DocumentStoreError as e:
        logger.error(f"❌ Error loading application {application_id}: {e}")
        flash(get_message("load_error", lang), "error")
        return redirect(url_for("index"))

    return send_file(
        export_crew_csv(application.crew_members),
        mimetype="text/csv",
        as_attachment=True,
        download_name=f"crew_{secure_filename(application.application_id)}_{len(application.crew_members)}_members.csv",
    )


def _is_https(url: str) -> bool:
    try:
        parsed = URL(url)
    except (TypeError, ValueError):
        return False
    return parsed.scheme == "https" and bool(parsed.host)


def _file_for(application_id: str, slot: str) -> Optional[FileRef]:
    """The stored file for ``slot``, or None if absent or not an https URL."""
    attribute = FILE_SLOTS.get(slot)
    if not attribute:
        return None
    file_ref = getattr(load_application(application_id).files, attribute)
    if file_ref is None or not file_ref.url:
        return None
    if not _is_https(file_ref.url):
        logger.warning(f"⚠️ Refusing non-https {slot} URL for {application_id}")
        return None
    return file_ref


@app.route("/applications/<application_id>/files/<slot>")
def preview_file(application_id, slot):
    """Preview a submitted file (redirect to its storage URL)."""
    if not require_auth():
        return "Unauthorized", 401

    lang = current_language()
    try:
        file_ref = _file_for(application_id, slot)
    except (ApplicationNotFoundError, DocumentStoreError) as e:
        logger.warning(f"⚠️ Could not resolve {slot} for {application_id}: {e}")
        file_ref = None
    if not file_ref:
        return get_message("file_unavailable", lang), 404
    return redirect(file_ref.url)


@app.route("/applications/<application_id>/files/<slot>/download")
def download_file(application_id, slot):
    """Stream a submitted file to the reviewer under its original file name."""
    if not require_auth():
        return "Unauthorized", 401

    lang = current_language()
    try:
        file_ref = _file_for(application_id, slot)
    except (ApplicationNotFoundError, DocumentStoreError) as e:
        logger.warning(f"⚠️ Could not resolve {slot} for {application_id}: {e}")
        file_ref = None
    if not file_ref:
        return get_message("file_unavailable", lang), 404

    upstream = None
    try:
        upstream = requests.get(file_ref.url, timeout=get_config().file_download_timeout, stream=True)
        upstream.raise_for_status()
    except requests.RequestException as e:
        if upstream is not None:
            upstream.close()
        logger.error(f"❌ Could not download {file_ref.url}: {e}")
        return get_message("file_unavailable", lang), 502

    def generate():
        try:
            yield from upstream.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE)
        finally:
            upstream.close()

    headers = {"Content-Disposition": f'attachment; filename="{secure_filename(file_ref.name) or slot}"'}
    content_length = upstream.headers.get("Content-Length")
    if content_length:
        headers["Content-Length"] = content_length
    return Response(
        stream_with_context(generate()),
        mimetype=upstream.headers.get("Content-Type", "application/octet-stream"),
        headers=headers,
    )


@app.route("/api/stats")
def api_stats():
    """Genre distribution and review-status counts (cached)."""
    if not require_auth():
        return jsonify({"success": False, "error": "Not authenticated"}), 401
    try:
        return jsonify({"success": True, **get_cached_stats()})
    except DocumentStoreError as e:
        logger.error(f"❌ Error computing stats: {e}")
        return jsonify({"success": False, "error": get_message("load_error", current_language())}), 500


if __name__ == "__main__":
    port = int(os.environ.get("PORT", os.environ.get("FLASK_PORT", 5000)))
    app.run(host="0.0.0.0", port=port, debug=False)
