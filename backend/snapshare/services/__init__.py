"""
SnapShare Backend: Services Layer
===================================

Service Inventory:
    - IngestValidator (validation.py): pure checks on create-post input
    - PostIngestPipeline (pipeline.py): upload → persist orchestration, feed listing
    - ObjectStore (object_store.py): abstract image storage + file naming
        - ImageKitObjectStore (imagekit_store.py): ImageKit CDN over httpx
        - LocalObjectStore (local_store.py): aiofiles writes under STORAGE_ROOT
    - PostRepository (post_repository.py): abstract persistence
        - SqlAlchemyPostRepository: async SQLAlchemy implementation
"""
