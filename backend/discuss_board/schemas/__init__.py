"""Request and response schemas (DTOs)."""
