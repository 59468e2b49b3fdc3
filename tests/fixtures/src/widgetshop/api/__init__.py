"""HTTP controllers of the widget shop."""
