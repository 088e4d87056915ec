"""HTTP interface for the relay controller."""
