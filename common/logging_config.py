"""
Logging Configuration and Conversion Audit Trail.

The conversion math itself performs no logging. This module provides the
loggers used by the service and command-line layers, and an optional audit
ledger that counts conversion outcomes per error kind so that rejected
input can be analysed after the fact.
"""

import json
import logging
import sys
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from common.errors import ConversionError


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Get a logger configured for the conversion system.

    Parameters
    ----------
    name : str
        Logger name (typically __name__).
    level : int
        Logging level.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


@dataclass
class ConversionFailure:
    """Record of a rejected conversion.

    Attributes
    ----------
    timestamp : datetime
        When the failure occurred.
    operation : str
        Public operation name ('to_mgrs', 'from_mgrs', ...).
    kind : str
        Error kind tag, e.g. 'MalformedMGRSString'.
    stage : str
        Pipeline stage that raised the error.
    message : str
        Error message.
    context : dict
        The offending input.
    """
    timestamp: datetime
    operation: str
    kind: str
    stage: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)


class ConversionAuditLogger:
    """Process-wide ledger of conversion outcomes.

    Thread Safety
    -------------
    All methods are thread-safe; conversions may be audited from any
    number of concurrent callers.

    Examples
    --------
    >>> audit = ConversionAuditLogger()
    >>> audit.record_success("to_mgrs")
    >>> audit.summary()["successes"]["to_mgrs"]
    1
    """

    _instance: Optional['ConversionAuditLogger'] = None
    _lock = threading.Lock()

    def __new__(cls) -> 'ConversionAuditLogger':
        """Singleton pattern for the global audit ledger."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._record_lock = threading.Lock()
        self._successes: Dict[str, int] = {}
        self._failures: List[ConversionFailure] = []
        self._logger = get_logger("audit")
        self._initialized = True

    def record_success(self, operation: str) -> None:
        with self._record_lock:
            self._successes[operation] = self._successes.get(operation, 0) + 1

    def record_failure(
        self,
        operation: str,
        error: ConversionError,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        """Record a rejected conversion.

        Parameters
        ----------
        operation : str
            Public operation name.
        error : ConversionError
            The tagged error returned to the caller.
        context : dict, optional
            The input that was rejected.
        """
        failure = ConversionFailure(
            timestamp=datetime.now(),
            operation=operation,
            kind=error.kind.value,
            stage=error.stage.value if error.stage else "",
            message=error.message,
            context=context or {}
        )
        with self._record_lock:
            self._failures.append(failure)

        self._logger.info(
            f"CONVERSION REJECTED | {operation} | {failure.kind} | "
            f"{failure.stage} | {failure.message}"
        )

    def summary(self) -> Dict[str, Any]:
        """Counts of successes per operation and failures per error kind."""
        with self._record_lock:
            failure_counts: Dict[str, int] = {}
            for f in self._failures:
                failure_counts[f.kind] = failure_counts.get(f.kind, 0) + 1
            return {
                "successes": dict(self._successes),
                "total_failures": len(self._failures),
                "failure_counts_by_kind": failure_counts,
            }

    def export(self, output_path: Path) -> None:
        """Export the summary and every failure record to JSON.

        Parameters
        ----------
        output_path : Path
            Path to write the JSON file.
        """
        with self._record_lock:
            failures = [
                {
                    "timestamp": f.timestamp.isoformat(),
                    "operation": f.operation,
                    "kind": f.kind,
                    "stage": f.stage,
                    "message": f.message,
                    "context": f.context
                }
                for f in self._failures
            ]
        artifacts = {"summary": self.summary(), "failures": failures}

        with open(output_path, 'w') as fh:
            json.dump(artifacts, fh, indent=2)

        self._logger.info(f"Exported conversion audit to {output_path}")

    def reset(self) -> None:
        with self._record_lock:
            self._successes.clear()
            self._failures.clear()
