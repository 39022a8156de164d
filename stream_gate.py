#!/usr/bin/env python3
"""
Stream audio from a URL and mute it while the microphone hears speech.
Microphone RMS above --threshold mutes playback; at or below unmutes.

Usage:
  python stream_gate.py
  python stream_gate.py --uri https://example.com/stream.mp3 --duration 0
  python stream_gate.py --threshold 6000 --release_threshold 4000 --hangover 10 -v
"""

from __future__ import annotations

import argparse
import logging
import sys

from speechgate.config import DEFAULT_URI, GateParams
from speechgate.gate import DEFAULT_THRESHOLD


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Speech-gated playback: stream a URL, mute it while the mic hears speech."
    )
    parser.add_argument("--uri", type=str, default=DEFAULT_URI, help="Stream URI (default: SoundHelix example MP3)")
    parser.add_argument("--duration", type=float, default=5.0, help="Stop after N seconds; 0 = run until Ctrl+C (default: 5)")
    parser.add_argument("--threshold", type=float, default=DEFAULT_THRESHOLD, help="Mute when mic RMS exceeds this, raw 16-bit units (default: 10000)")
    parser.add_argument("--release_threshold", type=float, default=None, help="Unmute only at/below this RMS (default: same as --threshold)")
    parser.add_argument("--hangover", type=int, default=0, help="Stay muted for N quiet blocks after speech (default: 0)")
    parser.add_argument("--initial", type=str, default="unmuted", choices=("muted", "unmuted"), help="Gate state before the first block")
    parser.add_argument("--mic_device", type=str, default=None, help="pulsesrc device name (default: system source)")
    parser.add_argument("--mic_gain", type=float, default=1.0, help="Mic amplification before level measurement (default: 1.0)")
    parser.add_argument("--sr", type=int, default=16000, help="Capture sample rate (default: 16000)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every block's RMS")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    params = GateParams(
        threshold=args.threshold,
        release_threshold=args.release_threshold,
        hangover_blocks=args.hangover,
        initial_state=args.initial,
        uri=args.uri,
        duration_s=args.duration,
        mic_device=args.mic_device,
        mic_gain=args.mic_gain,
        sample_rate=args.sr,
    )
    try:
        params.validate()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    from speechgate.player import GatedStreamer

    try:
        streamer = GatedStreamer(params)
        streamer.run()
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    c = streamer.controller
    print(f"\nStats: {c.blocks} blocks, {c.transitions} mute/unmute transitions")
    if streamer.error:
        print(f"Error: {streamer.error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
