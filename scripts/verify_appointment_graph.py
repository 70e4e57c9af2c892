#!/usr/bin/env python
"""CLI utility to check stored appointment edges against the graph rules."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional
from uuid import UUID

from rolegraph.core.database import session_scope
from rolegraph.services.appointments import AppointmentService


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Verify appointment edges are same-group and strictly descending.")
    parser.add_argument("--group-id", type=UUID, default=None, help="Only check edges of this group.")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging.")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    with session_scope() as session:
        violations = AppointmentService(session).find_invalid_edges(args.group_id)
        for violation in violations:
            edge = violation.appointment
            logging.error(
                "Invalid edge %s (level %s) -> %s (level %s): %s",
                edge.from_role_id,
                edge.from_role.level,
                edge.to_role_id,
                edge.to_role.level,
                violation.reason,
            )

    if violations:
        logging.error("Appointment graph verification failed: %s invalid edge(s)", len(violations))
        return 1

    logging.info("Appointment graph verified successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
