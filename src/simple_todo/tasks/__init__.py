"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Bucket, TaskBuckets)
- task_buckets.py: local-day classification into buckets
- task_store.py: Supabase-backed remote store
- task_engine.py: in-memory state, optimistic toggles and rollback
"""
