# Services package.
#
# Each module exposes one service class over a single record table on the
# storage platform:
#
#   comment_service    - CRUD + voting for Comment (backed by a CommentStore)
#   comment_store      - remote and in-memory comment backends
#   community_service  - CRUD + snippet search for Community
#   user_service       - CRUD + search for User
#
# Services receive their record client (or store) at construction and
# return a ServiceResult from every public method; callers decide how to
# surface failures.
