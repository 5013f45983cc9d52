"""
Code shared between the API routers and the tracking core.
"""

__all__: list[str] = []
