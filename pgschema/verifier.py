from __future__ import annotations

import logging
import re
import time
from typing import Any, Dict, List

import sqlglot
from sqlglot import exp
from sqlglot.errors import SqlglotError

from pgschema.errors.codes import ErrorCode
from pgschema.types import StageResult, StageTrace

log = logging.getLogger(__name__)

# `$mt_name` style bind placeholders; `$$` block markers are left alone
_PLACEHOLDER_RE = re.compile(r"(?<!\$)\$([A-Za-z_][A-Za-z0-9_]*)")
_DO_BLOCK_RE = re.compile(r"^DO\s+\$\$\s*\n(.*)\n\$\$;?$", re.DOTALL)
# `INSERT INTO t AS a (a.x, a.y)`; postgres target columns cannot be qualified
_INSERT_COLS_RE = re.compile(r"^(INSERT\s+INTO\s+[^(]+\()([^)]*)(\))", re.IGNORECASE)
_QUALIFIER_RE = re.compile(r"\b[A-Za-z_][A-Za-z0-9_]*\.")
_EMPTY_SET_RE = re.compile(r"\bSET\s+WHERE\b", re.IGNORECASE)
_NULL_KEY_RE = re.compile(r"\bWHERE\s+null\s*=\s*\$null\b", re.IGNORECASE)


def _unqualify_insert_columns(sql: str) -> str:
    return _INSERT_COLS_RE.sub(
        lambda m: m.group(1) + _QUALIFIER_RE.sub("", m.group(2)) + m.group(3), sql
    )


def _update_problems(sql: str) -> List[str]:
    problems: List[str] = []
    if _EMPTY_SET_RE.search(sql):
        problems.append("empty_set_clause")
    if _NULL_KEY_RE.search(sql):
        problems.append("missing_primary_key")
    return problems


def _ms(t0: float) -> int:
    return int(round((time.perf_counter() - t0) * 1000.0))


class StatementVerifier:
    """
    Verifier for generated statements:
    - plain statements are parsed with sqlglot (postgres dialect)
    - conditional `DO $$ ... $$;` blocks are checked structurally
    Verification never executes anything.
    """

    name = "verifier"

    def __init__(self, dialect: str = "postgres") -> None:
        self.dialect = dialect

    def verify(self, sql: str) -> StageResult:
        t0 = time.perf_counter()
        s = (sql or "").strip()
        notes: Dict[str, Any] = {"sql_length": len(s)}

        if not s:
            return self._fail(t0, notes, ["empty_sql"], ErrorCode.EMPTY_SQL)

        if s.upper().startswith("DO "):
            notes["kind"] = "do_block"
            problems = self._check_do_block(s)
            if problems:
                return self._fail(t0, notes, problems, ErrorCode.PARSE_ERROR)
            return self._ok(t0, notes, s)

        if s.upper().startswith("UPDATE"):
            problems = _update_problems(s)
            if problems:
                return self._fail(t0, notes, problems, ErrorCode.PARSE_ERROR)

        masked = _unqualify_insert_columns(_PLACEHOLDER_RE.sub(r":\1", s))
        notes["placeholders"] = _PLACEHOLDER_RE.findall(s)
        try:
            trees = [t for t in sqlglot.parse(masked, read=self.dialect) if t is not None]
        except SqlglotError as e:
            log.debug("parse failed: %s", e)
            return self._fail(t0, notes, [str(e)], ErrorCode.PARSE_ERROR)

        notes["statements"] = len(trees)
        if len(trees) != 1:
            return self._fail(
                t0, notes, ["Multiple statements detected"], ErrorCode.MULTIPLE_STATEMENTS
            )

        tree = trees[0]
        notes["kind"] = tree.key
        if isinstance(tree, exp.Update) and not tree.args.get("expressions"):
            return self._fail(t0, notes, ["empty_set_clause"], ErrorCode.PARSE_ERROR)
        return self._ok(t0, notes, s)

    def _check_do_block(self, sql: str) -> List[str]:
        problems: List[str] = []
        m = _DO_BLOCK_RE.match(sql)
        if not m:
            return ["malformed_do_block"]
        body = m.group(1)
        if "$$" in body:
            problems.append("unbalanced_dollar_quotes")
        lines = [ln.strip() for ln in body.splitlines() if ln.strip()]
        if not lines or lines[0].upper() != "BEGIN" or lines[-1].upper() != "END":
            problems.append("missing_begin_end")
        if body.upper().count("IF NOT EXISTS") != body.upper().count("END IF;"):
            problems.append("unbalanced_if")
        return problems

    def _ok(self, t0: float, notes: Dict[str, Any], sql: str) -> StageResult:
        notes["verified"] = True
        return StageResult(
            ok=True,
            data={"sql": sql},
            trace=StageTrace(
                stage=self.name,
                duration_ms=_ms(t0),
                summary="ok",
                notes=notes,
                sql_length=len(sql),
            ),
        )

    def _fail(
        self,
        t0: float,
        notes: Dict[str, Any],
        error: List[str],
        error_code: ErrorCode,
    ) -> StageResult:
        notes["verified"] = False
        log.warning("statement rejected by verifier: %s", error_code.value)
        return StageResult(
            ok=False,
            error=error,
            error_code=error_code,
            trace=StageTrace(
                stage=self.name,
                duration_ms=_ms(t0),
                summary="failed",
                notes=notes,
            ),
        )
