"""
e-Foncier Backend: API Routes Package
======================================

Route Inventory:
    - parcels.py:        /api/parcels, /api/parcels/{key}
    - parcel_history.py: /api/parcels/{key}/history
    - notes.py:          /api/parcels/{key}/notes[/{note_id}]
    - documents.py:      /api/parcels/{key}/documents[/{document_id}/file]
    - requests.py:       /api/requests[/{request_id}/status]
    - stats.py:          /api/stats, /api/stats/extended
    - seed.py:           /api/seed
    - health.py:         /health

Routes stay thin: read the request, call one service, shape the response.
Errors are raised by the services and rendered by the global handlers.
"""
