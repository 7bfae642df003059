"""
Infrastructure layer for the task management core.

This layer contains the implementation details for external systems integration:
- Database (SQLAlchemy, SQLite or PostgreSQL)
- File Storage (Supabase Storage)
- Event handlers for notifications

The infrastructure layer implements interfaces defined in the domain layer,
following the Dependency Inversion Principle of Clean Architecture.
"""
