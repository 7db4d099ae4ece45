from prometheus_client import Counter

from pgschema.errors.codes import ErrorCode
from pgschema.prom import REGISTRY

STATEMENT_KINDS = (
    "create_table",
    "enum_constraint",
    "fk_constraint",
    "drop_table",
    "select",
    "insert",
    "update",
    "delete",
)

DEGENERATE_REASONS = ("empty_insert", "empty_update", "missing_primary_key")


# -----------------------------------------------------------------------------
#  Generation metrics
# -----------------------------------------------------------------------------
statements_generated_total = Counter(
    "statements_generated_total",
    "Count of SQL statements generated by schema descriptors",
    ["kind"],  # e.g. create_table|select|insert|update|delete
    registry=REGISTRY,
)

degenerate_statements_total = Counter(
    "degenerate_statements_total",
    "Count of statements generated in a degenerate form",
    ["reason"],  # empty_insert | empty_update | missing_primary_key
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
#  Validation metrics
# -----------------------------------------------------------------------------
validation_issues_total = Counter(
    "validation_issues_total",
    "Count of schema validation issues by code",
    ["code"],
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
#  Prime all counters with zero so every series exists from the start
# -----------------------------------------------------------------------------
for kind in STATEMENT_KINDS:
    statements_generated_total.labels(kind=kind).inc(0)

for reason in DEGENERATE_REASONS:
    degenerate_statements_total.labels(reason=reason).inc(0)

for code in ErrorCode:
    validation_issues_total.labels(code=code.value).inc(0)
