"""Release planning, credentials and execution."""
