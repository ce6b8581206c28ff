import logging
from typing import Callable, Optional

import numpy as np
import pyaudiowpatch as pyaudio
import scipy.signal

from fluentme.config import Config, cfg
from fluentme.errors import DeviceUnavailable

logger = logging.getLogger(__name__)

AudioSink = Callable[[np.ndarray], None]


class AudioCapture:
    """
    Microphone producer. Delivers mono float32 buffers of `blocksize`
    samples at `sample_rate` to a sink from the PortAudio callback thread.
    """

    def __init__(self, config: Config = cfg):
        self.config = config
        self.sample_rate = config.sample_rate
        self.blocksize = config.capture_blocksize
        self.p: Optional[pyaudio.PyAudio] = None
        self.stream = None
        self.device_info = None
        self.sink: Optional[AudioSink] = None
        self.running = False

    def find_input_device(self):
        """Configured device (substring match) if set, otherwise the default input."""
        if self.config.capture_device:
            wanted = self.config.capture_device.lower()
            for i in range(self.p.get_device_count()):
                dev = self.p.get_device_info_by_index(i)
                if dev.get("maxInputChannels", 0) > 0 and wanted in dev["name"].lower():
                    logger.info("Selected input device (matched config): %s", dev["name"])
                    return dev
            logger.warning("Configured device '%s' not found, using default input", self.config.capture_device)

        try:
            dev = self.p.get_default_input_device_info()
        except (OSError, IOError):
            return None
        logger.info("Selected default input device: %s", dev["name"])
        return dev

    def _callback(self, in_data, frame_count, time_info, status):
        audio_data = np.frombuffer(in_data, dtype=np.float32)

        num_channels = self.channels
        if num_channels > 1:
            audio_data = audio_data.reshape(-1, num_channels).mean(axis=1)

        if self.device_rate != self.sample_rate:
            target_samples = int(round(len(audio_data) * self.sample_rate / self.device_rate))
            audio_data = scipy.signal.resample(audio_data, target_samples)

        if self.config.capture_gain != 1.0:
            audio_data = audio_data * self.config.capture_gain

        sink = self.sink
        if sink is not None:
            sink(audio_data.astype(np.float32, copy=False))

        return (None, pyaudio.paContinue)

    def start(self, sink: AudioSink):
        if self.running:
            return
        try:
            self.p = pyaudio.PyAudio()
            self.device_info = self.find_input_device()
            if not self.device_info:
                raise DeviceUnavailable("No audio input device found")

            self.channels = max(1, min(2, int(self.device_info["maxInputChannels"])))
            self.device_rate = int(self.device_info["defaultSampleRate"])
            # keep one callback == one VAD frame of `blocksize` target-rate samples
            frames_per_buffer = int(round(self.blocksize * self.device_rate / self.sample_rate))

            self.sink = sink
            self.stream = self.p.open(
                format=pyaudio.paFloat32,
                channels=self.channels,
                rate=self.device_rate,
                input=True,
                input_device_index=self.device_info["index"],
                frames_per_buffer=frames_per_buffer,
                stream_callback=self._callback,
            )
            self.stream.start_stream()
        except DeviceUnavailable:
            self._release()
            raise
        except (OSError, IOError, ValueError) as e:
            self._release()
            raise DeviceUnavailable(f"Cannot open audio input: {e}") from e

        self.running = True
        logger.info("Capturing from %s at %d Hz", self.device_info["name"], self.device_rate)

    def _release(self):
        self.sink = None
        if self.stream:
            try:
                self.stream.stop_stream()
                self.stream.close()
            except (OSError, IOError) as e:
                logger.warning("Error closing audio stream: %s", e)
            self.stream = None
        if self.p:
            self.p.terminate()
            self.p = None

    def stop(self):
        """Stop emitting buffers and release the device."""
        self.running = False
        self._release()
