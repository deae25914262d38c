"""
e-Foncier Backend: Services Layer
==================================

Business rules between the routes (HTTP) and the models (persistence).

Service Inventory:
    - ParcelService:   register listing, lookup, registration, audited update
    - HistoryService:  audit trail queries and manual entries
    - NoteService:     agent notes on a parcel
    - DocumentService: parcel attachments (metadata), built on FileService
    - FileService:     upload validation, storage and cleanup on disk
    - RequestService:  citizen document requests and their workflow
    - StatsService:    dashboard counters
    - SeedService:     generated test data

Services are stateless module-level singletons. Each method receives the
request's AsyncSession and flushes but never commits; get_db_session
commits once the route returns.
"""
