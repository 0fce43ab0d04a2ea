"""SSL Labs assessment report service."""
