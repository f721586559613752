"""
SnapShare Backend: API Routes Package
=======================================

Route Inventory:
    - posts.py:   POST /api/create-post   (validate, upload, persist)
                  GET  /api/post          (feed, newest first)
    - files.py:   GET  /api/files/{path}  (local object store only)
    - health.py:  GET  /health            (liveness)

Routes stay thin: read the request, call the validator/pipeline, render an
envelope. Status codes come from envelope.STATUS_BY_KIND.
"""
