"""
Domain entities and repositories for questions and responses.
"""
