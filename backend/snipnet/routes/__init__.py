"""
SnipNet Backend - API Routes Package
=====================================

Route Inventory:
    - friendships.py: /api/friendships/...  (relationship transitions and views)
    - social.py:      /api/social/...       (likes, comments, user tags)
    - users.py:       /api/users/resolve    (public user lookup)
    - health.py:      /health               (service health check)

Routes are thin: resolve the caller and any user named in the path, call a
service with the request's session, return its DTO.
"""
