"""expressgen -- endpoint scaffolding and database type generation for
Express + Kysely + Knex projects."""

__version__ = "0.1.0"
