"""Database operation mixins composed into SQLiteDatabaseHandler."""
