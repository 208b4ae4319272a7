"""
Employee Service package for the Employee Access Layer.

The service fronts the upstream employee-data API, adding:
- Read-through caching of the full listing and per-id lookups
- Aggregations (name search, highest salary, top earners)
- Retries when the upstream API rate limits us

Structure:
- app.main: FastAPI app, routes, and dependency wiring.
- app.adapters: HTTP client for the upstream employee API.
- app.caching: Employee cache and its backends.
- app.domain: Models and the caching/aggregation service.
"""
