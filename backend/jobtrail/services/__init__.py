# Services package init
"""
JobTrail Backend — Services Layer
===================================

What:  Business logic between the routes (HTTP) and the record store.
How:   Services are stateless: every call receives the request's AsyncSession
       and the owner id resolved by the identity gate. They raise JobTrailError
       subclasses; routes never catch them.

Service Inventory:
    - SyncService: pull/push reconciliation with last-write-wins
    - ResumeService: résumé upload, fetch, list, soft delete
    - ApplicationService: direct CRUD on applications (tombstone deletes)
    - AuthService: register, login, bearer-token authentication
"""
