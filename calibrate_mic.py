#!/usr/bin/env python3
"""
Measure microphone RMS in a quiet room and while speaking, then suggest a gate threshold.
Uses sounddevice for capture.

Usage:
  python calibrate_mic.py --list_devices
  python calibrate_mic.py --seconds 5 --device 1
"""

from __future__ import annotations

import argparse
import logging
import sys

from speechgate.loudness import rms_dbfs
from speechgate.meter import LevelStats, MicMeter, list_devices, suggest_threshold


def _print_stats(label: str, stats: LevelStats) -> None:
    print(
        f"  {label:<8} blocks={stats.count:>5}  mean={stats.mean:>8.1f}  "
        f"p95={stats.percentile(95):>8.1f}  peak={stats.peak:>8.1f}  "
        f"({rms_dbfs(stats.mean):.1f} dBFS)"
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="Suggest a speech gate threshold from live mic levels.")
    parser.add_argument("--list_devices", action="store_true", help="Print input devices and exit")
    parser.add_argument("--device", type=int, default=None, help="Input device index (default: system default)")
    parser.add_argument("--seconds", type=float, default=5.0, help="Seconds per measurement phase (default: 5)")
    parser.add_argument("--sr", type=int, default=16000)
    parser.add_argument("--block_ms", type=float, default=20.0)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    if args.list_devices:
        list_devices()
        return 0
    if args.seconds <= 0:
        print("Error: --seconds must be > 0", file=sys.stderr)
        return 1

    meter = MicMeter(sr=args.sr, block_ms=args.block_ms, device=args.device)
    try:
        input(f"Stay quiet for {args.seconds:.0f} s. Press Enter to start...")
        ambient = meter.measure(args.seconds)
        input(f"Now talk normally for {args.seconds:.0f} s. Press Enter to start...")
        speech = meter.measure(args.seconds)
    except KeyboardInterrupt:
        print("\nAborted.")
        return 1

    print()
    _print_stats("ambient", ambient)
    _print_stats("speech", speech)
    threshold = suggest_threshold(ambient, speech)
    print(f"\nSuggested: python stream_gate.py --threshold {threshold:.0f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
