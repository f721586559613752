"""
SnapShare Backend: Application Package
=======================================

What: Image-sharing API. Accepts an image and a caption, uploads the image to
      object storage, stores a Post record and serves the feed newest-first.

Layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP, envelopes, status codes
    ├─────────────────────────────────────┤
    │   Services (validator, pipeline)    │  ← validate → upload → persist
    ├─────────────────────────────────────┤
    │  Collaborators (object store, repo) │  ← ImageKit / local disk, SQLAlchemy
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
