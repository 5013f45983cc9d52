from starlette.requests import HTTPConnection

from courier_tracker.core.tracking.context import TrackingContext


def get_tracking_context(connection: HTTPConnection) -> TrackingContext:
    """Tracking context built by the application lifespan."""
    context = getattr(connection.app.state, "tracking", None)
    if context is None:
        raise RuntimeError("Tracking context is not initialized")
    return context
