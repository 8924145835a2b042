from .completion import Response, handle_event

__all__ = ["Response", "handle_event"]
