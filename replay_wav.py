#!/usr/bin/env python3
"""
Gate a recorded WAV offline: the same per-block decisions the live stream would make.
Useful for tuning --threshold / --hangover against real room recordings.

Usage:
  python replay_wav.py -i room.wav
  python replay_wav.py -i room.wav --threshold 6000 --hangover 10 --json samples/room_gate.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from speechgate.config import GateParams
from speechgate.gate import DEFAULT_THRESHOLD, GateDecision
from speechgate.replay import replay_file


def main() -> int:
    parser = argparse.ArgumentParser(description="Replay a WAV through the speech gate and report decisions.")
    parser.add_argument("-i", "--input", required=True, help="Input WAV path")
    parser.add_argument("--threshold", type=float, default=DEFAULT_THRESHOLD)
    parser.add_argument("--release_threshold", type=float, default=None)
    parser.add_argument("--hangover", type=int, default=0)
    parser.add_argument("--block_ms", type=float, default=20.0, help="Block size in ms (default: 20)")
    parser.add_argument("--sr", type=int, default=16000, help="Resample to this rate before gating (default: 16000)")
    parser.add_argument("--json", type=str, default=None, metavar="PATH", help="Write full per-block report as JSON")
    parser.add_argument("--show", action="store_true", help="Print one line per transition")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    params = GateParams(
        threshold=args.threshold,
        release_threshold=args.release_threshold,
        hangover_blocks=args.hangover,
        sample_rate=args.sr,
        block_ms=args.block_ms,
    )
    try:
        params.validate()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        report = replay_file(Path(args.input), params)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.show:
        prev = None
        for b in report.blocks:
            if b.decision is not prev:
                tag = "MUTE  " if b.decision is GateDecision.MUTED else "UNMUTE"
                print(f"  {b.start_s:8.2f}s  {tag}  rms={b.loudness:.1f}")
                prev = b.decision

    print(
        f"{args.input}: {len(report.blocks)} blocks of {report.block_samples} samples, "
        f"{report.transitions} transitions, muted {report.muted_ratio * 100:.1f}%, "
        f"peak RMS {report.peak_loudness:.1f}"
    )

    if args.json:
        out = Path(args.json)
        out.parent.mkdir(parents=True, exist_ok=True)
        with open(out, "w") as f:
            json.dump(report.to_dict(), f, indent=2)
        print(f"Report: {out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
