import os
import tempfile

# Point the app at a throwaway database before app.config is imported
_tmpdir = tempfile.mkdtemp(prefix="voice-tasks-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_tmpdir, 'test.sqlite')}"
os.environ.setdefault("APP_ENV", "test")
