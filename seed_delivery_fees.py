#!/usr/bin/env python3
"""Replace stored delivery fee configs with the seeded default distance tiers."""

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

from app.persistence.fee_configs import DatabaseNotConfiguredError, replace_fee_configs  # noqa: E402
from app.schemas.delivery_fee import DeliveryFeeConfigModel  # noqa: E402
from app.services.fees import DEFAULT_FEE_TIERS, build_fee_schedule  # noqa: E402


def main() -> int:
    logging.basicConfig(level=logging.INFO)
    # validate before touching the database
    build_fee_schedule(DEFAULT_FEE_TIERS)
    configs = [DeliveryFeeConfigModel.model_validate(record) for record in DEFAULT_FEE_TIERS]

    logging.info("Clearing existing delivery fee configs and seeding defaults...")
    try:
        count = replace_fee_configs(configs)
    except DatabaseNotConfiguredError as exc:
        logging.error(str(exc))
        return 1
    logging.info(f"Seeded {count} delivery fee configs.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
