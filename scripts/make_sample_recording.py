#!/usr/bin/env python3
"""
Write the synthetic demo session as a JSON Lines recording.

Useful for trying the replay path and as a template for hand-edited
recordings.

Usage:
    python scripts/make_sample_recording.py data/recordings/demo.jsonl
"""

import sys
import argparse
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from bodynav.modules.capture.replay_source import write_frames
from bodynav.modules.capture.synthetic import demo_session


def main():
    parser = argparse.ArgumentParser(description="Write the synthetic demo recording")
    parser.add_argument("output", type=str, help="Output .jsonl path")
    parser.add_argument("--operator-id", type=int, default=7)
    parser.add_argument("--bystander-id", type=int, default=3)
    args = parser.parse_args()

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    count = write_frames(output, demo_session(args.operator_id, args.bystander_id))
    print(f"Wrote {count} frames to {output}")


if __name__ == "__main__":
    main()
