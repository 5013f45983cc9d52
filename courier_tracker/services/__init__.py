"""
HTTP and WebSocket routers of the API.

- realtime_ws: courier position streaming and admin fan-out
- users: login and courier records
- packages: package records and assignment
- locations: latest position per courier
- health: liveness
"""

__all__: list[str] = []
