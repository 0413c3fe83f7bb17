"""PostgreSQL access: batch insert and submitted payload handling."""
