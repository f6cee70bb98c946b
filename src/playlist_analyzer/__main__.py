"""Entry point for running as a module."""
from playlist_analyzer.api import app
from playlist_analyzer.config import apply_collation_locale, env_int, load_local_env_file
import uvicorn

if __name__ == "__main__":
    load_local_env_file()
    apply_collation_locale()
    port = env_int("PORT", 8000)
    uvicorn.run(app, host="0.0.0.0", port=port)
