"""
HTML view routes for the frontend BFF.

Each request builds its own :class:`~task_client.TaskClient`-style pair of
managers on top of a :class:`CookieSessionStore`, with ``flask.flash`` as
the notifier.  The module is organised into three sections:

1. **Helpers** -- per-request client wiring, the ``login_required``
   decorator and form/payload conversion.
2. **Authentication routes** -- login, registration, logout, profile.
3. **Task routes** -- dashboard, list, create, edit, update, delete.

Whenever an API call answers 401 the store clears itself; the subscriber
registered in ``_client`` marks the request so the view redirects to the
login page instead of rendering.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any

from flask import (
    Blueprint,
    current_app,
    flash,
    g,
    redirect,
    render_template,
    request,
    url_for,
)

from task_client.api_client import ApiClient
from task_client.auth_session import AuthSessionManager
from task_client.models import FILTER_KEYS, TaskPriority, TaskStatus
from task_client.task_collection import TaskCollectionManager, search_tasks
from task_client.validation import (
    parse_due_date,
    validate_login_form,
    validate_profile_form,
    validate_registration_form,
    validate_task_form,
)

from ..session import CookieSessionStore

logger = logging.getLogger(__name__)

views_bp = Blueprint("views", __name__)

TASK_FORM_FIELDS = ("title", "description", "status", "priority", "dueDate", "category")


# =====================================================================
# Helper Functions
# =====================================================================


def _client() -> tuple[AuthSessionManager, TaskCollectionManager]:
    """
    Build (once per request) the managers bound to the session cookie.

    The session subscriber sets ``g.session_expired`` when the store is
    cleared by a 401, so views can bail out with ``_expired_redirect``.
    """
    if "auth_manager" not in g:
        store = CookieSessionStore()
        api = ApiClient(
            current_app.config["API_BASE_URL"],
            store,
            timeout=current_app.config["API_TIMEOUT"],
            http=current_app.extensions["taskflow_http"],
        )
        g.auth_manager = AuthSessionManager(api, flash)
        g.task_manager = TaskCollectionManager(api, flash)
        g.session_expired = False
        g.logging_out = False

        def _on_session_change(session) -> None:
            if session is None and not g.logging_out:
                g.session_expired = True

        store.subscribe(_on_session_change)
    return g.auth_manager, g.task_manager


def _expired_redirect():
    logger.info("Session expired during %s %s", request.method, request.path)
    flash("Session expired. Please log in again.", "error")
    return redirect(url_for("views.login"))


def login_required(view_func):
    """
    Decorator that requires an authenticated session for view routes.

    A stored token without a cached user is resolved through
    ``AuthSessionManager.restore``; any failure there clears the session and
    the user is redirected to the login page.
    """

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        auth, _ = _client()
        if not auth.token:
            return redirect(url_for("views.login"))
        if auth.user is None and not auth.restore():
            return _expired_redirect()

        g.user = auth.user
        return view_func(*args, **kwargs)

    return wrapper


def public_only(view_func):
    """Send already-authenticated users to the dashboard instead of the form."""

    @wraps(view_func)
    def wrapper(*args, **kwargs):
        auth, _ = _client()
        if auth.is_authenticated:
            return redirect(url_for("views.dashboard"))
        return view_func(*args, **kwargs)

    return wrapper


def _task_form_values(task: dict[str, Any] | None = None) -> dict[str, str]:
    """Form values for a blank form, or pre-filled from an API task record."""
    if task is None:
        return {
            "title": "",
            "description": "",
            "status": TaskStatus.PENDING.value,
            "priority": TaskPriority.MEDIUM.value,
            "dueDate": "",
            "category": "",
        }
    return {
        "title": task.get("title") or "",
        "description": task.get("description") or "",
        "status": task.get("status") or TaskStatus.PENDING.value,
        "priority": task.get("priority") or TaskPriority.MEDIUM.value,
        "dueDate": (task.get("dueDate") or "")[:10],
        "category": task.get("category") or "",
    }


def _task_payload(form: dict[str, str]) -> dict[str, Any]:
    """Convert validated form values into the API's task payload."""
    due = parse_due_date(form["dueDate"])
    return {
        "title": form["title"].strip(),
        "description": form["description"].strip() or None,
        "status": form["status"],
        "priority": form["priority"],
        # Midnight UTC of the chosen day
        "dueDate": f"{due.isoformat()}T00:00:00+00:00" if due else None,
        "category": form["category"].strip() or None,
    }


def _render_task_form(form: dict[str, str], errors: dict[str, str], task_id=None, status_code=200):
    if task_id is None:
        action = url_for("views.create_task")
        title = "Create New Task"
    else:
        action = url_for("views.update_task", task_id=task_id)
        title = "Edit Task"
    return (
        render_template(
            "task_form.html",
            form=form,
            errors=errors,
            statuses=TaskStatus,
            priorities=TaskPriority,
            form_action=action,
            form_title=title,
        ),
        status_code,
    )


# =====================================================================
# Authentication Routes
# =====================================================================


@views_bp.route("/health", methods=["GET"])
def health_check():
    """Public liveness probe."""
    return {"status": "healthy", "service": "frontend"}, 200


@views_bp.route("/login", methods=["GET"])
@public_only
def login():
    return render_template("login.html", form={}, errors={})


@views_bp.route("/login", methods=["POST"])
@public_only
def login_submit():
    """Validate the form, then authenticate through the auth manager."""
    form = {
        "email": request.form.get("email", "").strip(),
        "password": request.form.get("password", ""),
    }
    errors = validate_login_form(form["email"], form["password"])
    if errors:
        return render_template("login.html", form=form, errors=errors), 400

    auth, _ = _client()
    if not auth.login(form["email"], form["password"]):
        return render_template("login.html", form=form, errors={}), 401
    return redirect(url_for("views.dashboard"))


@views_bp.route("/register", methods=["GET"])
@public_only
def register():
    return render_template("register.html", form={}, errors={})


@views_bp.route("/register", methods=["POST"])
@public_only
def register_submit():
    """Validate the sign-up form; a successful registration logs the user in."""
    form = {
        "name": request.form.get("name", "").strip(),
        "email": request.form.get("email", "").strip(),
        "password": request.form.get("password", ""),
        "confirmPassword": request.form.get("confirmPassword", ""),
    }
    errors = validate_registration_form(
        form["name"], form["email"], form["password"], form["confirmPassword"]
    )
    if errors:
        return render_template("register.html", form=form, errors=errors), 400

    auth, _ = _client()
    if not auth.register(form["name"], form["email"], form["password"]):
        errors = {"general": "Registration failed. Please try again."}
        return render_template("register.html", form=form, errors=errors), 400
    return redirect(url_for("views.dashboard"))


@views_bp.route("/logout", methods=["POST"])
def logout():
    auth, _ = _client()
    g.logging_out = True
    auth.logout()
    return redirect(url_for("views.login"))


@views_bp.route("/profile", methods=["GET"])
@login_required
def profile():
    form = {"name": g.user.get("name", ""), "email": g.user.get("email", "")}
    return render_template("profile.html", user=g.user, form=form, errors={})


@views_bp.route("/profile", methods=["POST"])
@login_required
def profile_submit():
    """Validate and send a profile update (name and email only)."""
    form = {
        "name": request.form.get("name", "").strip(),
        "email": request.form.get("email", "").strip(),
    }
    errors = validate_profile_form(form["name"], form["email"])
    if errors:
        return render_template("profile.html", user=g.user, form=form, errors=errors), 400

    auth, _ = _client()
    if not auth.update_profile(name=form["name"], email=form["email"]):
        if g.session_expired:
            return _expired_redirect()
        return render_template("profile.html", user=g.user, form=form, errors={}), 400
    return redirect(url_for("views.profile"))


# =====================================================================
# Task Routes
# =====================================================================


@views_bp.route("/")
def index():
    return redirect(url_for("views.dashboard"))


@views_bp.route("/dashboard")
@login_required
def dashboard():
    """Statistics cards plus the five most recent tasks."""
    _, tasks = _client()
    tasks.fetch_tasks()
    tasks.fetch_stats()
    if g.session_expired:
        return _expired_redirect()
    return render_template(
        "dashboard.html",
        user=g.user,
        stats=tasks.stats or {},
        recent_tasks=tasks.recent_tasks(),
    )


@views_bp.route("/tasks")
@login_required
def task_list():
    """Task list with status/priority/category filters and a text search."""
    filters = {key: request.args.get(key, "") for key in FILTER_KEYS}
    search = request.args.get("q", "")

    _, tasks = _client()
    tasks.fetch_tasks(filters)
    if g.session_expired:
        return _expired_redirect()

    return render_template(
        "tasks.html",
        tasks=search_tasks(tasks.tasks, search),
        filters=filters,
        search=search,
        statuses=TaskStatus,
        priorities=TaskPriority,
    )


@views_bp.route("/tasks/new")
@login_required
def new_task():
    return _render_task_form(_task_form_values(), {})


@views_bp.route("/tasks", methods=["POST"])
@login_required
def create_task():
    form = {field: request.form.get(field, "") for field in TASK_FORM_FIELDS}
    errors = validate_task_form(form)
    if errors:
        return _render_task_form(form, errors, status_code=400)

    _, tasks = _client()
    if tasks.create_task(_task_payload(form)):
        return redirect(url_for("views.task_list"))
    if g.session_expired:
        return _expired_redirect()
    return _render_task_form(form, {}, status_code=400)


@views_bp.route("/tasks/<int:task_id>/edit")
@login_required
def edit_task(task_id: int):
    _, tasks = _client()
    task = tasks.get_task(task_id)
    if g.session_expired:
        return _expired_redirect()
    if task is None:
        flash("Task not found", "error")
        return redirect(url_for("views.task_list"))
    return _render_task_form(_task_form_values(task), {}, task_id=task_id)


@views_bp.route("/tasks/<int:task_id>/update", methods=["POST"])
@login_required
def update_task(task_id: int):
    form = {field: request.form.get(field, "") for field in TASK_FORM_FIELDS}
    errors = validate_task_form(form)
    if errors:
        return _render_task_form(form, errors, task_id=task_id, status_code=400)

    _, tasks = _client()
    if tasks.update_task(task_id, _task_payload(form)):
        return redirect(url_for("views.task_list"))
    if g.session_expired:
        return _expired_redirect()
    return _render_task_form(form, {}, task_id=task_id, status_code=400)


@views_bp.route("/tasks/<int:task_id>/delete", methods=["POST"])
@login_required
def delete_task(task_id: int):
    _, tasks = _client()
    tasks.delete_task(task_id)
    if g.session_expired:
        return _expired_redirect()
    return redirect(url_for("views.task_list"))
