"""Directory login with first-login account provisioning."""
