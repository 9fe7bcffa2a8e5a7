"""
Services layer - business logic lives here, never in routes.

- ward_resolver / coordinate_validator: location checks at report creation
- status_workflow: report status lifecycle and update log entries
- vote_service: boost counting
- query_planner / analytics_service: read-side listing and aggregation
- report_store: persistence (Firestore or in-memory)
- report_service: composes the above for the API routes
"""
