"""orm-study: ORM mapping and query-building study project on SQLAlchemy."""
