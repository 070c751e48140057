# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets. Use .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "SIMPLETODO_APP_NAME": "App display name (default: Simple Todo).",
    "SIMPLETODO_LOG_LEVEL": "Console logging level (default: INFO).",
    # Supabase
    "SIMPLETODO_SUPABASE_URL": "Supabase project URL (also read from SUPABASE_URL).",
    "SIMPLETODO_SUPABASE_ANON_KEY": "Supabase anon key (also read from SUPABASE_ANON_KEY).",
    "SIMPLETODO_TODOS_TABLE": "Table holding the tasks (default: todos).",
    "SIMPLETODO_EMAIL_DOMAIN": "Domain used to turn usernames into e-mails (default: simpletodo.app).",
    "SIMPLETODO_HTTP_TIMEOUT_SECONDS": "HTTP timeout for Supabase calls (default: 10).",
    # Paths (gitignored)
    "SIMPLETODO_DATA_DIR": "Local data directory (default: .local/simple_todo).",
    "SIMPLETODO_SESSION_PATH": "Saved session file (default: <data_dir>/session.json).",
    "SIMPLETODO_PERSIST_SESSION": "Keep the session between runs (true/false, default: true).",
}
