# Services package init
"""
ClientHub Backend - Services Layer
==================================

What:  Business logic between routes (HTTP) and the database/filesystem.

Service Inventory:
    - security.PasswordHasher / TokenService: password hashes and session tokens
    - AuthService:   login, logout (token revocation), password change
    - ClientService: client repository plus add/update orchestration
    - AssetService:  client image storage on local disk

Every service has a module-level singleton wired from `settings`; tests build
their own instances with explicit arguments.
"""
