"""
Realtime WebSocket gateway.

- couriers stream their positions (location-update)
- admin dashboards receive every stored position (delivery-location-update)
"""
