"""FastAPI application serving the blog and the calculator page."""
