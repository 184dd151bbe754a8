"""Package alias parsing and version ordering."""
