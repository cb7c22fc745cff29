# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Structured diagnostics

Extraction never prints. Every non-fatal problem (a skipped tag, an
out-of-range coordinate, a truncated MakerNote stream) is recorded as a
Diagnostic and returned alongside the result. Each entry is also sent
to the standard logging module so applications that only configure
logging still see it.

Copyright 2025 DNAi inc.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Iterator


logger = logging.getLogger(__name__)


class Severity(Enum):
    """Diagnostic severity levels"""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def log_level(self) -> int:
        return _LOG_LEVELS[self]


_LOG_LEVELS = {
    Severity.DEBUG: logging.DEBUG,
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


@dataclass
class Diagnostic:
    """One recorded problem or note from an extraction run."""
    severity: Severity
    message: str
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.value,
            "message": self.message,
            "context": dict(self.context),
        }


class Diagnostics:
    """
    Collector for diagnostics produced during one extraction.

    A fresh collector is created per parse, so no state is shared
    between calls.
    """

    def __init__(self, source: str = ""):
        """
        Args:
            source: Optional label (usually the file name) added to log lines
        """
        self.source = source
        self.entries: List[Diagnostic] = []

    def add(self, severity: Severity, message: str, **context: Any) -> Diagnostic:
        entry = Diagnostic(severity, message, context)
        self.entries.append(entry)
        if self.source:
            logger.log(severity.log_level, "%s: %s", self.source, message)
        else:
            logger.log(severity.log_level, "%s", message)
        return entry

    def debug(self, message: str, **context: Any) -> Diagnostic:
        return self.add(Severity.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> Diagnostic:
        return self.add(Severity.INFO, message, **context)

    def warning(self, message: str, **context: Any) -> Diagnostic:
        return self.add(Severity.WARNING, message, **context)

    def error(self, message: str, **context: Any) -> Diagnostic:
        return self.add(Severity.ERROR, message, **context)

    def by_severity(self, severity: Severity) -> List[Diagnostic]:
        return [d for d in self.entries if d.severity is severity]

    @property
    def warnings(self) -> List[Diagnostic]:
        return self.by_severity(Severity.WARNING)

    @property
    def errors(self) -> List[Diagnostic]:
        return self.by_severity(Severity.ERROR)

    def to_list(self) -> List[Dict[str, Any]]:
        return [d.to_dict() for d in self.entries]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
