"""Prepare local storage for the configured medium."""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from workout_log.config import get_settings
from workout_log.database import init_db


def main() -> None:
    settings = get_settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    if settings.storage_backend == "database":
        init_db()
        print("Database initialised at", settings.database_url)
    else:
        print("Data directory ready at", settings.data_dir)


if __name__ == "__main__":
    main()
