"""HTTP API for the storefront web UI."""
