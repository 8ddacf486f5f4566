"""Video metadata service application package."""
