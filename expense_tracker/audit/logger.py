"""
Audit Logger

DESIGN DECISION: Every change to the ledger or the registry is logged.
This provides:
1. Traceability across the two front ends
2. Debugging capability when the files disagree with what a user expected
3. A record of cascades (how many expenses a category deletion moved)

The audit logger:
- Is synchronous, like the rest of the application
- Never raises: a logging problem must not abort a user action
- Supports correlation IDs to group the events of one user action
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from expense_tracker.models.audit import AuditEvent, AuditEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(ensure_ascii=False)
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """
    Route structured logs to stderr at the given level.

    Called once by each front end at startup.
    """
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
    )


def get_logger(name: Optional[str] = None):
    return structlog.get_logger(name)


class AuditLogger:
    """
    Central audit logging service.

    Events go to the structured local log. There is no persisted audit
    trail: the JSON files only ever hold expenses and categories.
    """

    def __init__(self, source: str = "core"):
        """
        Initialize audit logger.

        Args:
            source: Which front end emits the events ("cli", "web", ...)
        """
        self._source = source
        self._logger = structlog.get_logger("expense_tracker.audit")

    @property
    def source(self) -> str:
        return self._source

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be written.
        """
        log_dict = event.to_log_dict()
        log_dict["source"] = self._source

        try:
            if event.severity.value in ("error", "critical"):
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            elif event.severity.value == "debug":
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Log failure but don't raise
            logging.getLogger(__name__).error(
                "audit logging failed for %s: %s", event.event_id, e
            )
            return False

        return True

    def log_expense_added(
        self,
        expense_id: str,
        amount: str,
        category: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expense_added(
            expense_id=expense_id,
            amount=amount,
            category=category,
            correlation_id=correlation_id,
        ))

    def log_expense_updated(
        self,
        expense_id: str,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expense_updated(
            expense_id=expense_id,
            changed_fields=changed_fields,
            correlation_id=correlation_id,
        ))

    def log_expense_deleted(
        self,
        expense_id: str,
        amount: str,
        category: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expense_deleted(
            expense_id=expense_id,
            amount=amount,
            category=category,
            correlation_id=correlation_id,
        ))

    def log_category_added(
        self,
        name: str,
        implicit: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.category_added(
            name=name,
            implicit=implicit,
            correlation_id=correlation_id,
        ))

    def log_category_renamed(
        self,
        old_name: str,
        new_name: str,
        relabeled: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.category_renamed(
            old_name=old_name,
            new_name=new_name,
            relabeled=relabeled,
            correlation_id=correlation_id,
        ))

    def log_category_deleted(
        self,
        name: str,
        relabeled: int,
        fallback: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.category_deleted(
            name=name,
            relabeled=relabeled,
            fallback=fallback,
            correlation_id=correlation_id,
        ))

    def log_categories_seeded(self, categories: list[str]) -> None:
        self.log(AuditEventBuilder.categories_seeded(categories))

    def log_validation_failed(
        self,
        issues: list[dict],
        entity_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.validation_failed(
            issues=issues,
            entity_id=entity_id,
            correlation_id=correlation_id,
        ))

    def log_storage_format_error(
        self,
        path: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.storage_format_error(
            path=path,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., deleting a category)
    and pass it through every operation that action triggers.
    """
    return uuid4()
