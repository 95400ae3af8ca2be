"""Dialog workflow domain.

This package holds:
- wire models for inbound events and outbound messages
- the error taxonomy for per-event failures
- the dialog controller that correlates events across services
"""

__all__: list[str] = []
