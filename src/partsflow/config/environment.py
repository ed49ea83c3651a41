from dotenv import load_dotenv
import os
from pathlib import Path
from typing import Dict, Optional

# Load .env only once when this file is imported
env_path = Path.cwd() / ".env"
load_dotenv(dotenv_path=env_path)

def environment_overrides() -> Dict[str, Optional[str]]:
    """Environment values that take precedence over the YAML settings."""
    return {
        "data_dir": os.getenv("PARTSFLOW_DATA_DIR"),
        "export_dir": os.getenv("PARTSFLOW_EXPORT_DIR"),
        "log_level": os.getenv("PARTSFLOW_LOG_LEVEL"),
    }
