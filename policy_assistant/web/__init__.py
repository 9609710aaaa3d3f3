"""HTTP interface for the Policy Assistant."""
