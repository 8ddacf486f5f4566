"""Auth service application package."""
