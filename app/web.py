"""
Flask Web Front End for Expense Tracker

The route table only translates HTTP into calls on the shared flows.
Every request reloads the files; nothing is kept between requests.

Form pages (HTML) redirect after a POST and report problems with flash
messages. JSON routes report problems with status codes:
- 404 unknown expense / category
- 409 duplicate category name
- 422 rejected input
- 500 corrupt data file
"""

from typing import Optional

from flask import (
    Blueprint,
    Flask,
    Response,
    current_app,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)

from expense_tracker.audit import configure_logging, get_logger
from expense_tracker.config import get_settings, validate_all_settings
from expense_tracker.ledger import InvalidCategoryError
from expense_tracker.orchestrator import AppComponents, create_app_components
from expense_tracker.queries import expenses_to_csv, expenses_to_json
from expense_tracker.services.storage import (
    DuplicateError,
    InvalidFormatError,
    NotFoundError,
    StorageError,
)
from expense_tracker.validation import ExpenseValidationError


logger = get_logger(__name__)

bp = Blueprint("expenses", __name__)

EXPENSE_FIELDS = ("amount", "category", "description", "date")


def components() -> AppComponents:
    return current_app.extensions["expense_tracker"]


def _form_values() -> dict:
    data = request.get_json(silent=True) if request.is_json else None
    source = data if isinstance(data, dict) else request.form
    return {name: source.get(name) for name in EXPENSE_FIELDS if name in source}


def _flash_validation(error: ExpenseValidationError) -> None:
    for message in error.result.error_messages:
        flash(message, "danger")


def _recent_limit() -> int:
    return current_app.config["RECENT_EXPENSES_LIMIT"]


# =============================================================================
# PAGES
# =============================================================================

@bp.get("/")
def index():
    """Dashboard: total and most recent expenses."""
    flow = components().expenses
    expenses = flow.list_expenses()
    return render_template(
        "index.html",
        total=flow.total(expenses),
        recent_expenses=flow.recent_expenses(_recent_limit()),
        categories=components().categories.list_categories(),
    )


@bp.get("/expenses")
def list_expenses():
    flow = components().expenses
    expenses = flow.list_expenses()
    return render_template(
        "expenses.html",
        expenses=expenses,
        total=flow.total(expenses),
        categories=components().categories.list_categories(),
    )


@bp.post("/expenses")
def create_expense():
    """Create an expense; unknown categories are registered on the way."""
    try:
        expense = components().expenses.add_expense(_form_values())
    except ExpenseValidationError as e:
        _flash_validation(e)
        return redirect(url_for("expenses.list_expenses"))

    flash(f"Dépense ajoutée : {expense.amount}€ - {expense.category}", "success")
    return redirect(url_for("expenses.list_expenses"))


@bp.get("/expenses/<expense_id>/edit")
def edit_expense(expense_id: str):
    expense = components().expenses.get_expense(expense_id)
    return render_template(
        "edit_expense.html",
        expense=expense,
        categories=components().categories.list_categories(),
    )


@bp.post("/expenses/<expense_id>")
def update_expense(expense_id: str):
    try:
        components().expenses.edit_expense(expense_id, _form_values())
    except ExpenseValidationError as e:
        _flash_validation(e)
        return redirect(url_for("expenses.edit_expense", expense_id=expense_id))

    flash("Dépense modifiée.", "success")
    return redirect(url_for("expenses.list_expenses"))


@bp.delete("/expenses/<expense_id>")
def delete_expense(expense_id: str):
    components().expenses.delete_expense(expense_id)
    return jsonify(success=True)


@bp.get("/categories")
def list_categories():
    expenses = components().expenses.all_in_stored_order()
    usage: dict[str, int] = {}
    for expense in expenses:
        usage[expense.category] = usage.get(expense.category, 0) + 1
    return render_template(
        "categories.html",
        categories=components().categories.list_categories(),
        usage=usage,
    )


@bp.post("/categories")
def create_category():
    name = request.form.get("name", "")
    try:
        created = components().categories.add_category(name)
    except InvalidCategoryError as e:
        flash(str(e), "danger")
    else:
        if created:
            flash(f"Catégorie ajoutée : {name.strip()}", "success")
        else:
            flash(f"La catégorie '{name.strip()}' existe déjà.", "warning")
    return redirect(url_for("expenses.list_categories"))


@bp.patch("/categories/<path:name>")
def rename_category(name: str):
    data = request.get_json(silent=True) if request.is_json else None
    if isinstance(data, dict):
        new_name = data.get("name")
    else:
        new_name = request.form.get("name")
    relabeled = components().categories.rename_category(name, new_name or "")
    return jsonify(success=True, relabeled=relabeled)


@bp.delete("/categories/<path:name>")
def delete_category(name: str):
    relabeled = components().categories.delete_category(name)
    return jsonify(success=True, relabeled=relabeled)


@bp.get("/reports")
def reports():
    return render_template("reports.html", report=components().reports.build())


# =============================================================================
# EXPORTS
# =============================================================================

@bp.get("/export/csv")
def export_csv():
    payload = expenses_to_csv(components().expenses.all_in_stored_order())
    return Response(
        payload,
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=expenses.csv"},
    )


@bp.get("/export/json")
def export_json():
    payload = expenses_to_json(components().expenses.all_in_stored_order())
    return Response(
        payload,
        mimetype="application/json",
        headers={"Content-Disposition": "attachment; filename=expenses.json"},
    )


# =============================================================================
# API
# =============================================================================

@bp.get("/api/expenses")
def api_expenses():
    expenses = components().expenses.all_in_stored_order()
    return jsonify([expense.to_record() for expense in expenses])


@bp.get("/api/categories")
def api_categories():
    return jsonify(components().categories.list_categories())


@bp.get("/api/stats")
def api_stats():
    return jsonify(components().reports.stats().to_api_dict())


# =============================================================================
# ERRORS
# =============================================================================

def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(NotFoundError)
    def not_found(e):
        return jsonify(success=False, error="not_found", message=str(e)), 404

    @app.errorhandler(DuplicateError)
    def duplicate(e):
        return jsonify(success=False, error="duplicate", message=str(e)), 409

    @app.errorhandler(ExpenseValidationError)
    def invalid_expense(e):
        return jsonify(
            success=False,
            error="invalid_expense",
            message=str(e),
            issues=[issue.model_dump() for issue in e.result.issues],
        ), 422

    @app.errorhandler(InvalidCategoryError)
    def invalid_category(e):
        return jsonify(success=False, error="invalid_category", message=str(e)), 422

    @app.errorhandler(InvalidFormatError)
    def invalid_format(e):
        components().audit_logger.log_storage_format_error(
            path=e.location or "",
            error_message=str(e),
        )
        return jsonify(success=False, error="invalid_format", message=str(e)), 500

    @app.errorhandler(StorageError)
    def storage_error(e):
        components().audit_logger.log_error(
            error_type=type(e).__name__,
            error_message=str(e),
        )
        return jsonify(success=False, error="storage_error", message=str(e)), 500

    @app.errorhandler(404)
    def page_not_found(e):
        return jsonify(success=False, error="not_found"), 404


def create_app(
    app_components: Optional[AppComponents] = None,
    config: Optional[dict] = None,
) -> Flask:
    """
    Application factory.

    Args:
        app_components: Pre-built flows (tests pass components backed by a
                        temporary directory). Defaults to the configured files.
        config: Extra Flask config values
    """
    settings = get_settings()
    web_settings = settings.web

    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=web_settings.secret_key,
        RECENT_EXPENSES_LIMIT=settings.app.recent_expenses_limit,
    )
    if config:
        app.config.update(config)

    app.extensions["expense_tracker"] = app_components or create_app_components(source="web")
    app.register_blueprint(bp)
    register_error_handlers(app)
    return app


def main() -> None:
    """Run the development server (``expense-tracker-web``)."""
    settings = get_settings()
    configure_logging(settings.app.log_level)

    status = validate_all_settings()
    for name in ("storage", "web", "app"):
        if not status[name]:
            logger.error("invalid_settings", section=name, error=status.get(f"{name}_error"))
            raise SystemExit(1)

    app = create_app()
    web_settings = settings.web
    logger.info(
        "web_starting",
        host=web_settings.host,
        port=web_settings.port,
        environment=settings.app.app_environment,
    )
    app.run(
        host=web_settings.host,
        port=web_settings.port,
        debug=web_settings.debug or settings.app.debug_mode,
    )


if __name__ == "__main__":
    main()
