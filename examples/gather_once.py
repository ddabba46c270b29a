"""
Single Cycle Example
====================

This example runs one extraction cycle against a Gadgetbridge export,
prints the collected points, and shows how watermark state is carried
into the next run.

Usage:
    python examples/gather_once.py /path/to/Gadgetbridge.db
"""

import sys

from gadgetbridge_etl import MemorySink, Settings, create_pipeline
from gadgetbridge_etl.utils.logging import setup_logging


def main(database_path: str) -> None:
    """Run the single cycle example."""
    setup_logging(level="INFO", format="console")

    settings = Settings(sources={"database_paths": [database_path]})
    pipeline = create_pipeline(settings)

    # First cycle reads every row
    sink = MemorySink()
    result = pipeline.gather(sink)
    print(f"\n1. First cycle emitted {result.points_emitted} points")
    for point in sink.points[:5]:
        print(f"   {point.to_dict()}")
    if result.error is not None:
        print(f"   Failures:\n{result.error}")

    # State can be persisted and handed to a new pipeline
    state = pipeline.export_state()
    print(f"\n2. Watermarks: {state['last_table_times']}")

    resumed = create_pipeline(settings)
    resumed.import_state(state)

    sink.clear()
    result = resumed.gather(sink)
    print(f"\n3. Resumed cycle emitted {result.points_emitted} points")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)
    main(sys.argv[1])
