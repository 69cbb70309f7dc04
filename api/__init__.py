"""HTTP API for the conversation gate."""
