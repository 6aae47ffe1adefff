"""Campus complaints escalation service."""
