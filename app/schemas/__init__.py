"""
Schemas module - Request/Response schemas for API endpoints.

Difference from models:
- Models: entities held in the CSV-backed caches (app.models)
- Schemas: API contract (what client sends/receives)
"""
