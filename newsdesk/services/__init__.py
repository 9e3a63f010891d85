# Services package: the content store.
#
# Each module exposes async functions over a single collection:
#
#   article_service  — listing, search, view counting, CRUD for Article
#   comment_service  — thread listing and CRUD for Comment
#   user_service     — keyed CRUD for User (unique email), UserProfile rows
#
# All service functions accept an AsyncSession as their first argument
# so that the caller controls the transaction boundary via the
# ``get_db`` dependency.  None of them make authorization decisions.
