"""Application services (token lifecycle) and their ports."""
