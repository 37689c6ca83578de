"""
SnipNet Backend - Services Layer
=================================

What:  Business logic between routes (HTTP) and the database.
How:   Each service is a stateless singleton. Methods take the request's
       AsyncSession as their first argument, flush but never commit, and
       report failures through the exceptions in snipnet.exceptions.

Service Inventory:
    - user_directory:      id-or-username → canonical user id
    - friendship_service:  relationship state machine (send/accept/decline/block)
    - social_graph:        friend requests and friends lists
    - interaction_service: likes, comments, user tags and counters
"""
