"""CRUD HTTP service for users, built on FastAPI and async SQLAlchemy."""
