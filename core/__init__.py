"""Database connection, query executors and exceptions."""
