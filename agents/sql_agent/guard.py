"""Query guard: safety validation and identifier quoting for generated SQL."""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

import sqlparse

logger = logging.getLogger(__name__)

READ_ONLY_KEYWORD = "SELECT"

FORBIDDEN_KEYWORDS = [
    "CREATE", "DROP", "ALTER", "DELETE", "INSERT", "UPDATE", "TRUNCATE", "MERGE",
    "GRANT", "REVOKE", "COPY", "INTO",
    "EXEC", "EXECUTE", "CALL",
    "SET", "RESET",
]

# Functions that change session identity or privilege, or stall the connection
FORBIDDEN_FUNCTIONS = [
    "set_config",
    "app_set_session_user",
    "app_clear_session_user",
    "pg_sleep",
    "dblink",
]

# Physical identifiers that only resolve when quoted with their exact case
KNOWN_IDENTIFIERS = [
    "createdAt", "created_at",
    "updatedAt", "updated_at",
    "vendorLocation", "vendor_location",
    "vendorId", "vendor_id",
    "customerId", "customer_id",
    "driverId", "driver_id",
    "vendorLocationId", "vendor_location_id",
    "isActive", "is_active",
    "isAvailable", "is_available",
    "firstName", "first_name",
    "lastName", "last_name",
    "licenseNumber", "license_number",
    "licenseExpiryDate", "license_expiry_date",
    "vehicleNumber", "vehicle_number",
    "vehicleType", "vehicle_type",
    "orderNumber", "order_number",
    "totalAmount", "total_amount",
    "userId", "user_id",
]

# Single-quoted literals and double-quoted identifiers, with doubled-quote escapes
_QUOTED_SEGMENT = re.compile(r"('(?:[^']|'')*'|\"(?:[^\"]|\"\")*\")")
_DOLLAR_QUOTE = re.compile(r"\$\w*\$")


def _unquoted_text(sql: str) -> Tuple[Optional[str], str]:
    """Walk ``sql`` the way the PostgreSQL lexer does and drop quoted content.

    Returns ``(reason, text)`` where ``text`` keeps only what lies outside
    literals and quoted identifiers. ``reason`` is set when the query uses
    a form the walk cannot see through: comments, escape strings, Unicode
    escapes, dollar quoting or an unterminated quote.
    """
    text = []
    i = 0
    length = len(sql)
    while i < length:
        ch = sql[i]
        pair = sql[i:i + 2]

        if pair in ("--", "/*"):
            return "SQL comments are not allowed", ""

        if ch == "$" and _DOLLAR_QUOTE.match(sql, i):
            return "Dollar-quoted strings are not allowed", ""

        if ch in ("'", '"'):
            prefix = sql[max(0, i - 2):i]
            if prefix.upper() == "U&":
                return "Unicode escapes are not allowed", ""
            before = prefix[:-1]
            if ch == "'" and prefix[-1:] in ("e", "E") and not (before.isalnum() or before == "_"):
                return "Escape string literals are not allowed", ""

            # Skip to the closing quote; a doubled quote is an escaped one
            j = i + 1
            while True:
                j = sql.find(ch, j)
                if j == -1:
                    return "Unterminated quoted text", ""
                if sql[j + 1:j + 2] == ch:
                    j += 2
                    continue
                break
            text.append(ch * 2)
            i = j + 1
            continue

        text.append(ch)
        i += 1

    return None, "".join(text)


@dataclass(frozen=True)
class Executable:
    """A query cleared for execution, already normalized."""

    query: str
    valid: bool = True


@dataclass(frozen=True)
class Rejected:
    """A query refused by the guard."""

    reason: str
    valid: bool = False


GuardVerdict = Union[Executable, Rejected]


class QueryGuard:
    """Decide whether generated SQL may run and fix identifier casing."""

    def __init__(
        self,
        forbidden_keywords: Iterable[str] = FORBIDDEN_KEYWORDS,
        forbidden_functions: Iterable[str] = FORBIDDEN_FUNCTIONS,
        identifiers: Iterable[str] = KNOWN_IDENTIFIERS
    ):
        self.forbidden_keywords = list(forbidden_keywords)
        self.forbidden_functions = list(forbidden_functions)
        self._forbidden_patterns = [
            (word, re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE))
            for word in self.forbidden_keywords + self.forbidden_functions
        ]

        self.identifiers = sorted(set(identifiers), key=len, reverse=True)
        self._identifier_pattern = (
            re.compile(r"\b(?:" + "|".join(re.escape(i) for i in self.identifiers) + r")\b")
            if self.identifiers else None
        )

    def rejection_reason(self, sql: str) -> Optional[str]:
        """Return why ``sql`` may not run, or None when it is acceptable."""
        if not sql or not sql.strip():
            return "Empty query"

        if not sql.strip().upper().startswith(READ_ONLY_KEYWORD):
            return f"Only {READ_ONLY_KEYWORD} queries are allowed"

        # Matched against the raw text, so a forbidden word inside a literal
        # ('set', 'update pending') also rejects the query
        for word, pattern in self._forbidden_patterns:
            if pattern.search(sql):
                return f"Forbidden keyword '{word}' detected"

        reason, unquoted = _unquoted_text(sql)
        if reason:
            return reason

        unquoted = unquoted.strip()
        if unquoted.endswith(";"):
            unquoted = unquoted[:-1]
        statements = [s for s in sqlparse.split(sql) if s.strip().rstrip(";").strip()]
        if ";" in unquoted or len(statements) > 1:
            return "Multiple statements are not allowed"

        return None

    def validate(self, sql: str) -> bool:
        """True when ``sql`` is read-only shaped and free of forbidden tokens."""
        logger.info(f"Validating SQL query: {sql[:200]}")

        reason = self.rejection_reason(sql)
        if reason:
            logger.warning(f"Query rejected: {reason}")
            return False

        logger.info("SQL query passed validation")
        return True

    def normalize(self, sql: str) -> str:
        """Quote known mixed-case identifiers outside literals and existing quotes."""
        if self._identifier_pattern is None:
            return sql

        segments = _QUOTED_SEGMENT.split(sql)
        # Even positions are unquoted text, odd positions the quoted segments
        for i in range(0, len(segments), 2):
            segments[i] = self._identifier_pattern.sub(lambda m: f'"{m.group(0)}"', segments[i])
        return "".join(segments)

    def check(self, sql: str) -> GuardVerdict:
        """Validate then normalize, returning a tagged verdict."""
        logger.info(f"Validating SQL query: {(sql or '')[:200]}")

        reason = self.rejection_reason(sql)
        if reason:
            logger.warning(f"Query rejected: {reason}")
            return Rejected(reason=reason)

        normalized = self.normalize(sql.strip())
        logger.info(f"SQL query passed validation, normalized: {normalized[:200]}")
        return Executable(query=normalized)
