import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


class EnvManager:
    """Read configuration values from the process environment (and .env)."""

    @staticmethod
    def get_env_variable(name: str, default: Optional[str] = None) -> str:
        value = os.getenv(name, default)
        if value is None:
            raise KeyError(f"Environment variable '{name}' is not set")
        return value
