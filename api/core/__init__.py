"""
Shared, cross-cutting code for the catalog API.

`core/` holds the small building blocks every feature uses (DB wiring,
settings, logging, the error taxonomy). Feature-specific SQL and business
logic live in the feature packages (`resources/`, `resource_types/`,
`transfer/`).
"""
