"""Decision core (pure, no I/O).

- `evaluator`: allow/deny for one resource (override > deny > allow > default deny)
- `differ`: per-category suppression diff for a whole catalog
"""
