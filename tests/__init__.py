import os
import tempfile

# Keep tests offline and deterministic regardless of the developer's .env.
os.environ["OPENAI_API_KEY"] = ""
os.environ["GROQ_API_KEY"] = ""
os.environ["API_KEY"] = ""
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")
os.environ.setdefault("ANALYSIS_DB_PATH", os.path.join(tempfile.mkdtemp(prefix="checkresume-tests-"), "test.db"))
