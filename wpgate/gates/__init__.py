"""Gate callers: turn core decisions into the effect each host surface needs."""
