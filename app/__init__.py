"""
Front ends for Expense Tracker.

- ``app.cli``: interactive terminal menu (Rich)
- ``app.web``: web application (Flask)

Both are thin: they call the flows built by
``expense_tracker.orchestrator.create_app_components``.
"""
