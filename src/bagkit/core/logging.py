# ============================================================================
# SOURCEFILE: logging.py
# RELPATH: bagkit/src/bagkit/core/logging.py
# PROJECT: BagKit v1.0
# TEAM: Ringo (Owner), John (Lead Dev), George (Architect), Paul (Lead Analyst)
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Structured JSON logging for bag operations and diagnostics
# ============================================================================

"""
Structured Logging Module.

Module-level diagnostics go through the standard ``logging`` package. On top
of that, StructuredLogger records one JSON object per line for each bag
operation so runs can be audited or checked by tests.
"""

from __future__ import annotations

import io
import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


def _ensure_stream_utf8(stream: Optional[io.TextIOBase]) -> Optional[io.TextIOBase]:
    """Ensure a text stream writes UTF-8, wrapping if necessary."""
    if stream is None:
        return None

    encoding = getattr(stream, "encoding", None)
    if isinstance(encoding, str) and encoding.lower() == "utf-8":
        return stream

    # Native reconfigure first, wrapping below as the fallback
    reconfigure = getattr(stream, "reconfigure", None)
    if callable(reconfigure):
        try:
            reconfigure(encoding="utf-8", errors="backslashreplace")
            return stream
        except (ValueError, OSError, io.UnsupportedOperation):
            pass

    buffer = getattr(stream, "buffer", None)
    if buffer is None:
        return stream

    try:
        stream.flush()
    except (ValueError, OSError):
        pass

    try:
        wrapped = io.TextIOWrapper(buffer, encoding="utf-8", errors="backslashreplace")
    except (ValueError, OSError, TypeError):
        return stream

    setattr(wrapped, "_bagkit_utf8_wrapper", True)
    return wrapped


def configure_utf8_logging(force: bool = False) -> None:
    """Configure stdout/stderr and root logger handlers for UTF-8 output.

    Bag-info values and payload names are frequently non-ASCII, and Windows
    consoles often default to cp1252. Safe to call multiple times.
    """
    streams: Iterable[str] = ("stdout", "stderr")
    for name in streams:
        stream = getattr(sys, name, None)
        if stream is None:
            continue

        new_stream = _ensure_stream_utf8(stream)
        if new_stream is not None and new_stream is not stream:
            setattr(sys, name, new_stream)

    root = logging.getLogger()
    if force and not root.handlers:
        root.addHandler(logging.StreamHandler(sys.stderr))

    for handler in root.handlers:
        stream = getattr(handler, "stream", None)
        if stream is None:
            continue
        new_stream = _ensure_stream_utf8(stream)
        if new_stream is not None and new_stream is not stream:
            handler.setStream(new_stream)


class LogEvent(Enum):
    """Enumeration of loggable events."""
    OPERATION_START = "operation_start"
    OPERATION_COMPLETE = "operation_complete"
    ERROR = "error"
    WARNING = "warning"
    VALIDATION = "validation"
    CHECKSUM_FAILED = "checksum_failed"
    PACKAGED = "packaged"


class StructuredLogger:
    """
    JSON-lines logger for BagKit operations.

    Every entry has ``sessionId``, ``timestamp``, ``event`` and ``details``.
    Entries are also kept in memory for inspection.
    """

    def __init__(self, log_dir: str = "logs", session_id: Optional[str] = None):
        """
        Initialize structured logger.

        Args:
            log_dir: Directory for log files
            session_id: Optional session ID (generated if not provided)
        """
        self.log_dir = Path(log_dir)
        self.session_id = session_id or str(uuid.uuid4())
        self.start_time = datetime.now(timezone.utc)

        timestamp = self.start_time.strftime("%Y%m%d_%H%M%S")
        self.log_file = self.log_dir / f"bagkit_session_{timestamp}_{self.session_id[:8]}.json"
        self._ensure_log_file_exists()

        self.log_buffer: List[Dict] = []

    def _ensure_log_file_exists(self) -> None:
        """Create the log directory and touch the log file; never raises."""
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.log_file.touch(exist_ok=True)
        except OSError as e:
            logger.warning("Unable to create log file %s: %s", self.log_file, e)

    def log_operation_start(self,
                            operation: str,
                            source: str,
                            destination: Optional[str] = None) -> None:
        """
        Log the start of a bag operation.

        Args:
            operation: "create", "validate", "info" or "package"
            source: Bag directory, archive or payload path
            destination: Output location, if any
        """
        self._write_log_entry(self._create_log_entry(
            LogEvent.OPERATION_START,
            {"operation": operation, "source": source, "destination": destination}
        ))

    def log_operation_complete(self,
                               operation: str,
                               source: str,
                               destination: Optional[str],
                               payload_files: int,
                               elapsed_ms: int) -> None:
        self._write_log_entry(self._create_log_entry(
            LogEvent.OPERATION_COMPLETE,
            {
                "operation": operation,
                "source": source,
                "destination": destination,
                "payloadFiles": payload_files,
                "elapsedMs": elapsed_ms
            }
        ))

    def log_error(self,
                  operation: str,
                  source: str,
                  error_message: str,
                  error_type: str,
                  file_path: Optional[str] = None) -> None:
        """
        Log an error during an operation.

        Args:
            operation: Operation name
            source: Bag being processed
            error_message: Human-readable error message
            error_type: Exception class name
            file_path: Specific file that caused the error (if applicable)
        """
        self._write_log_entry(self._create_log_entry(
            LogEvent.ERROR,
            {
                "operation": operation,
                "source": source,
                "errorMessage": error_message,
                "errorType": error_type,
                "filePath": file_path
            }
        ))

    def log_warning(self, message: str, context: Optional[Dict] = None) -> None:
        self._write_log_entry(self._create_log_entry(
            LogEvent.WARNING,
            {"message": message, "context": context or {}}
        ))

    def log_validation(self,
                       bag_path: str,
                       valid: bool,
                       reason: Optional[str] = None,
                       message: Optional[str] = None) -> None:
        """
        Log a validation outcome.

        Args:
            bag_path: Bag directory
            valid: Whether validation passed
            reason: ValidationReason value on failure
            message: Failure detail
        """
        self._write_log_entry(self._create_log_entry(
            LogEvent.VALIDATION,
            {"bagPath": bag_path, "valid": valid, "reason": reason, "message": message}
        ))

    def log_checksum_failed(self,
                            file_path: str,
                            expected: str,
                            actual: str,
                            manifest_kind: str) -> None:
        self._write_log_entry(self._create_log_entry(
            LogEvent.CHECKSUM_FAILED,
            {
                "filePath": file_path,
                "expected": expected,
                "actual": actual,
                "manifestKind": manifest_kind
            }
        ))

    def log_packaged(self, bag_path: str, output: str, fmt: str) -> None:
        self._write_log_entry(self._create_log_entry(
            LogEvent.PACKAGED,
            {"bagPath": bag_path, "output": output, "format": fmt}
        ))

    def _create_log_entry(self, event: LogEvent, details: Dict[str, Any]) -> Dict:
        return {
            "sessionId": self.session_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event": event.value,
            "details": details
        }

    def _write_log_entry(self, entry: Dict) -> None:
        self.log_buffer.append(entry)

        # One JSON object per line
        try:
            with open(self.log_file, 'a', encoding='utf-8') as f:
                f.write(json.dumps(entry, ensure_ascii=False) + '\n')
        except OSError as e:
            logger.warning("Failed to write log entry: %s", e)

    def get_session_logs(self) -> List[Dict]:
        return list(self.log_buffer)

    def export_session_summary(self) -> Dict:
        """
        Export session summary statistics.

        Returns:
            Summary dictionary with counts per event type
        """
        summary = {
            "sessionId": self.session_id,
            "startTime": self.start_time.isoformat(),
            "endTime": datetime.now(timezone.utc).isoformat(),
            "totalEvents": len(self.log_buffer),
            "eventCounts": {}
        }

        for entry in self.log_buffer:
            event_type = entry["event"]
            summary["eventCounts"][event_type] = summary["eventCounts"].get(event_type, 0) + 1

        return summary


# ============================================================================
# Global Logger Instance
# ============================================================================

_global_logger: Optional[StructuredLogger] = None


def get_logger(log_dir: str = "logs") -> StructuredLogger:
    """Return the session logger, creating it on first use."""
    global _global_logger
    if _global_logger is None:
        _global_logger = StructuredLogger(log_dir)
    return _global_logger


def new_session(log_dir: str = "logs") -> StructuredLogger:
    """Start a new logging session and make it the global one."""
    global _global_logger
    _global_logger = StructuredLogger(log_dir)
    return _global_logger


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: None (standalone logging)
# TESTS: tests/unit/test_logging.py
# ============================================================================
