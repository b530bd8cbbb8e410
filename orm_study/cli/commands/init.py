"""init command - Write the default database configuration file."""

import logging
from pathlib import Path

from omegaconf import OmegaConf

logger = logging.getLogger("orm-study")

DEFAULT_DB_CONFIG = {
    "host": "localhost",
    "port": 5432,
    "user": "postgres",
    "password": "${oc.env:PGPASSWORD,postgres}",
    "database": "orm_study",
}


def init() -> None:
    """Write configs/db.yaml with default connection settings.

    An existing file is left untouched.

    Examples:
      orm-study init
      orm-study --config-path=/my/configs init
    """
    import orm_study.cli as cli

    config_dir = cli.CONFIG_PATH or Path.cwd() / "configs"
    db_yaml = config_dir / "db.yaml"

    if db_yaml.exists():
        logger.info(f"  [skip] {db_yaml} (already exists)")
        return

    config_dir.mkdir(parents=True, exist_ok=True)
    OmegaConf.save(OmegaConf.create(DEFAULT_DB_CONFIG), db_yaml)
    logger.info(
        f"  [ok] {db_yaml}"
        "\nNext steps:"
        "\n  1. Edit configs/db.yaml with your database credentials"
        "\n  2. Create the database: orm-study db create"
        "\n  3. Load sample data: orm-study db seed"
    )
