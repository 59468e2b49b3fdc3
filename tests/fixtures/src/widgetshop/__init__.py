"""Widget shop sample service."""
