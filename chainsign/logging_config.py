"""
Logging configuration for chainsign.

Provides structured JSON logging and an audit logger for verification
events. Library modules only obtain loggers; handlers are installed by
`configure_logging`, which the CLI calls.
"""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, List, Optional

# Verification id of the document currently being checked, if any
verification_id_var: ContextVar[str] = ContextVar('verification_id', default='')

PLAIN_FORMAT = '%(asctime)s %(levelname)-8s %(name)s: %(message)s'


class StructuredFormatter(logging.Formatter):
    """One JSON object per line: standard record fields plus audit extras."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc)
                .isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        current_id = verification_id_var.get()
        if current_id:
            entry["verification_id"] = current_id

        entry.update(getattr(record, "extra_fields", {}))

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class AuditLogger:
    """
    Emits verification audit events.

    Every event is a log record whose message is `<EVENT>: <summary>` and
    whose `extra_fields` attribute carries the event type, the current
    verification id and the event's own fields.
    """

    def __init__(self, name: str = "chainsign.audit"):
        self.logger = logging.getLogger(name)

    def emit(self, level: int, event_type: str, summary: str, **fields: Any) -> None:
        if not self.logger.isEnabledFor(level):
            return

        self.logger.log(
            level,
            "%s: %s",
            event_type,
            summary,
            extra={
                "extra_fields": {
                    "event_type": event_type,
                    "verification_id": verification_id_var.get(),
                    **fields,
                }
            }
        )

    def verification_request(self, document_id: Optional[str], signature_count: int) -> None:
        self.emit(
            logging.INFO,
            "VERIFICATION_REQUEST",
            f"Verifying {signature_count} signature(s)",
            document_id=document_id,
            signature_count=signature_count,
        )

    def verification_result(
        self,
        document_id: Optional[str],
        is_valid: bool,
        error: Optional[str] = None,
        failed_signers: Optional[List[str]] = None
    ) -> None:
        """Valid outcomes log at INFO, invalid ones at WARNING."""
        self.emit(
            logging.INFO if is_valid else logging.WARNING,
            "VERIFICATION_RESULT",
            "Document valid" if is_valid else f"Document invalid: {error}",
            document_id=document_id,
            is_valid=is_valid,
            error=error,
            failed_signers=list(failed_signers or []),
        )

    def signature_failure(self, signer_id: str, index: int, failure: str, reason: str) -> None:
        self.emit(
            logging.WARNING,
            "SIGNATURE_FAILURE",
            f"Signature {index} by {signer_id} failed: {failure}",
            signer_id=signer_id,
            index=index,
            failure=failure,
            reason=reason,
        )


def configure_logging(
    level: str = "WARNING",
    json_format: bool = False,
    log_file: Optional[str] = None
) -> None:
    """
    Install handlers on the root logger, replacing any existing ones.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Emit `StructuredFormatter` JSON lines instead of plain text
        log_file: Also write to this file
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    formatter = StructuredFormatter() if json_format else logging.Formatter(PLAIN_FORMAT)

    # stderr keeps stdout free for command output
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(numeric_level)


def set_verification_id(verification_id: Optional[str] = None) -> str:
    """Set (or generate) the verification id for the current context and return it."""
    if verification_id is None:
        verification_id = str(uuid.uuid4())
    verification_id_var.set(verification_id)
    return verification_id


def get_verification_id() -> str:
    return verification_id_var.get()


audit_log = AuditLogger()
