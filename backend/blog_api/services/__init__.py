"""
Blog API - Services Layer
=========================

What:  Business logic between the routes (HTTP) and the database.
How:   Services receive the request's AsyncSession and the caller's
       AuthContext per call and return response schemas. They are built
       once by build_context() and reached through the AppContext.

Service Inventory:
    - AuthService:  registration and login
    - PostService:  post CRUD orchestration
    - visibility:   pure read/ownership policy used by PostService
"""
