"""
GStreamer wiring for speech-gated playback.

Two pipelines share one GLib main loop:
  playback: playbin uri=...                       (volume written by the gate)
  capture:  pulsesrc ! audioamplify ! audioconvert ! audioresample
            ! audio/x-raw,format=S16LE,channels=1,rate=R ! level ! fakesink

A buffer probe on level's src pad hands every captured block to the
GateController on the streaming thread.
"""

from __future__ import annotations

import logging
import signal
from typing import Optional

import gi

gi.require_version("Gst", "1.0")
from gi.repository import GLib, Gst  # noqa: E402

from .config import GateParams  # noqa: E402
from .gate import GateController  # noqa: E402
from .probe import gate_buffer  # noqa: E402

logger = logging.getLogger(__name__)

Gst.init(None)


def make_element(factory: str, name: Optional[str] = None) -> Gst.Element:
    """Create a GStreamer element or raise if the plugin is not installed."""
    element = Gst.ElementFactory.make(factory, name)
    if element is None:
        raise RuntimeError(f"Failed to create element {factory!r} (is the plugin installed?)")
    return element


class PlaybinVolume:
    """VolumeControl backed by playbin's 'volume' property."""

    def __init__(self, playbin: Gst.Element):
        self.playbin = playbin

    def set_volume(self, level: float) -> None:
        self.playbin.set_property("volume", float(level))

    def get_volume(self) -> float:
        return float(self.playbin.get_property("volume"))


def build_playback(uri: str) -> Gst.Element:
    playbin = make_element("playbin", "stream-player")
    playbin.set_property("uri", uri)
    return playbin


def build_capture(params: GateParams) -> tuple[Gst.Pipeline, Gst.Element]:
    """Return (pipeline, level element) for the microphone path."""
    pipeline = Gst.Pipeline.new("mic-capture")
    mic = make_element("pulsesrc", "mic")
    if params.mic_device:
        mic.set_property("device", params.mic_device)
    amplify = make_element("audioamplify", "mic-gain")
    amplify.set_property("amplification", float(params.mic_gain))
    convert = make_element("audioconvert", "mic-convert")
    resample = make_element("audioresample", "mic-resample")
    caps = make_element("capsfilter", "mic-caps")
    caps.set_property(
        "caps",
        Gst.Caps.from_string(
            f"audio/x-raw,format=S16LE,channels=1,rate={params.sample_rate}"
        ),
    )
    level = make_element("level", "mic-level")
    sink = make_element("fakesink", "mic-sink")
    sink.set_property("sync", False)

    chain = [mic, amplify, convert, resample, caps, level, sink]
    for element in chain:
        pipeline.add(element)
    for upstream, downstream in zip(chain, chain[1:]):
        if not upstream.link(downstream):
            raise RuntimeError(
                f"Failed to link {upstream.get_name()} to {downstream.get_name()}"
            )
    return pipeline, level


def attach_level_probe(level: Gst.Element, controller: GateController) -> int:
    """Run the gate on every buffer leaving the level element. Returns the probe id."""

    def on_buffer(pad: Gst.Pad, info: Gst.PadProbeInfo) -> Gst.PadProbeReturn:
        gate_buffer(info.get_buffer(), controller, Gst.MapFlags.READ)
        return Gst.PadProbeReturn.OK

    pad = level.get_static_pad("src")
    return pad.add_probe(Gst.PadProbeType.BUFFER, on_buffer)


class GatedStreamer:
    """Owns both pipelines, the gate, and the main loop."""

    def __init__(self, params: GateParams):
        self.params = params
        self.playbin = build_playback(params.uri)
        self.volume = PlaybinVolume(self.playbin)
        self.controller = params.make_controller(self.volume)
        self.capture, self._level = build_capture(params)
        attach_level_probe(self._level, self.controller)
        self._main_loop: Optional[GLib.MainLoop] = None
        self._running = False
        self.error: Optional[str] = None
        self._sources: dict[str, int] = {}

    def start(self) -> None:
        # Initial level is written before capture starts; the gate is the only writer after.
        self.volume.set_volume(self.controller.level_for(self.controller.state))
        for pipeline in (self.playbin, self.capture):
            ret = pipeline.set_state(Gst.State.PLAYING)
            if ret == Gst.StateChangeReturn.FAILURE:
                self.stop()
                raise RuntimeError(f"Unable to set {pipeline.get_name()} to PLAYING")
        self._running = True
        logger.info("Streaming audio from %s", self.params.uri)

    def stop(self) -> None:
        for pipeline in (self.capture, self.playbin):
            pipeline.set_state(Gst.State.NULL)
        if self._running:
            logger.info("Pipelines stopped")
        self._running = False
        if self._main_loop is not None and self._main_loop.is_running():
            self._main_loop.quit()

    def _on_bus_message(self, bus: Gst.Bus, message: Gst.Message, source: str) -> bool:
        t = message.type
        if t == Gst.MessageType.EOS:
            logger.info("%s: end of stream", source)
            self.stop()
        elif t == Gst.MessageType.ERROR:
            err, debug = message.parse_error()
            self.error = f"{source}: {err.message}"
            logger.error("%s error: %s (%s)", source, err.message, debug)
            self.stop()
        elif t == Gst.MessageType.WARNING:
            warn, debug = message.parse_warning()
            logger.warning("%s warning: %s (%s)", source, warn.message, debug)
        return True

    def _on_signal(self, signum: int) -> bool:
        logger.info("Signal %d received, stopping", signum)
        self._sources.pop(f"signal-{signum}", None)
        self.stop()
        return GLib.SOURCE_REMOVE

    def _on_timeout(self) -> bool:
        logger.info("Stopping after %.1f s", self.params.duration_s)
        self._sources.pop("timeout", None)
        self.stop()
        return GLib.SOURCE_REMOVE

    def run(self) -> None:
        """Start, then block in the main loop until EOS, error, signal, or duration."""
        buses = []
        self._main_loop = GLib.MainLoop()
        try:
            for pipeline, source in ((self.playbin, "playback"), (self.capture, "capture")):
                bus = pipeline.get_bus()
                bus.add_signal_watch()
                buses.append(bus)
                bus.connect("message", self._on_bus_message, source)

            for signum in (signal.SIGINT, signal.SIGTERM):
                self._sources[f"signal-{signum}"] = GLib.unix_signal_add(
                    GLib.PRIORITY_DEFAULT, signum, self._on_signal, signum
                )
            if self.params.duration_s > 0:
                self._sources["timeout"] = GLib.timeout_add(
                    int(self.params.duration_s * 1000), self._on_timeout
                )

            self.start()
            self._main_loop.run()
        finally:
            self.stop()
            for source_id in self._sources.values():
                GLib.source_remove(source_id)
            self._sources.clear()
            for bus in buses:
                bus.remove_signal_watch()
