"""Run one session-start materialization pass: ``python -m budgetsaver``."""

import json
import sys
from typing import Optional

from budgetsaver.log import configure_logging
from budgetsaver.session import create_app_components


def main(argv: Optional[list[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    configure_logging()
    session_flow, _, _ = create_app_components(data_dir=argv[0] if argv else None)
    report = session_flow.run()
    print(json.dumps(report.to_log_dict(), indent=2))
    return 1 if report.issues else 0


if __name__ == "__main__":
    sys.exit(main())
