"""CSV input and JSON report output."""
