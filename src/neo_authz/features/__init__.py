"""Feature modules of neo-authz."""
