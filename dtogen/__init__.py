"""Generate Python DTOs from an OpenAPI spec."""

__version__ = "0.1.0"
