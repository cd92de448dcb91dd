"""Follow graph and follow-request service for the pin-sharing app."""
