# Services package.
#
# Each module exposes a focused set of async functions that encapsulate
# validation and database access for a single domain aggregate:
#
#   article_service  - validated CRUD for Article
#
# All service functions accept an AsyncSession as their first argument
# so that the caller controls the transaction boundary via
# ``app.database.session_scope``.
