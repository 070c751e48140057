"""
Simple Todo: a personal task tracker backed by Supabase.

Components:
- tasks/task_models.py: data structures (Task, Bucket, TaskBuckets)
- tasks/task_buckets.py: pure local-day classification into buckets
- tasks/task_store.py: Supabase (PostgREST) task store adapter
- tasks/task_engine.py: in-memory task state with optimistic toggles + rollback
- auth/session.py: Supabase sign-in / sign-up and the local session file
- connectors/console_connector.py: interactive console front-end
"""
