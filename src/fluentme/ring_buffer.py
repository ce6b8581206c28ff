import threading
from typing import List, Optional

import numpy as np

from fluentme.models import AudioFrame


class RingBuffer:
    """Fixed-size circular store for mono float32 samples."""

    def __init__(self, size_samples: int, dtype=np.float32):
        self.size_samples = size_samples
        self.dtype = dtype
        self.buffer = np.zeros(size_samples, dtype=dtype)
        self.write_index = 0
        self.lock = threading.Lock()
        self.full = False
        self.total_written = 0      # samples written since creation, including overwritten ones

    def __len__(self) -> int:
        with self.lock:
            return self.size_samples if self.full else self.write_index

    def write(self, data: np.ndarray):
        """Append data, overwriting the oldest samples once full."""
        n_samples = len(data)
        if n_samples == 0:
            return

        with self.lock:
            self.total_written += n_samples
            if n_samples >= self.size_samples:
                self.buffer[:] = data[-self.size_samples:]
                self.write_index = 0
                self.full = True
                return

            remaining_space = self.size_samples - self.write_index
            if n_samples < remaining_space:
                self.buffer[self.write_index:self.write_index + n_samples] = data
                self.write_index += n_samples
            else:
                # wrap around
                self.buffer[self.write_index:] = data[:remaining_space]
                wrapped = n_samples - remaining_space
                self.buffer[:wrapped] = data[remaining_space:]
                self.write_index = wrapped
                self.full = True

    def get_last_n_samples(self, n_samples: int) -> np.ndarray:
        """Most recent n_samples, oldest first. Returns fewer if not available."""
        with self.lock:
            available = self.size_samples if self.full else self.write_index
            n_samples = min(n_samples, available)
            if n_samples <= 0:
                return np.zeros(0, dtype=self.dtype)

            start_idx = self.write_index - n_samples
            if start_idx >= 0:
                return self.buffer[start_idx:self.write_index].copy()
            return np.concatenate((self.buffer[start_idx:], self.buffer[:self.write_index]))

    def get_all(self) -> np.ndarray:
        with self.lock:
            if not self.full:
                return self.buffer[:self.write_index].copy()
            return np.concatenate((self.buffer[self.write_index:], self.buffer[:self.write_index]))

    def get_since(self, offset: int, max_samples: Optional[int] = None) -> np.ndarray:
        """
        Samples from absolute position `offset` onwards, oldest first.

        Positions count every sample ever written; an offset that has
        already been overwritten starts at the oldest retained sample.
        """
        with self.lock:
            available = self.size_samples if self.full else self.write_index
            start_abs = max(offset, self.total_written - available)
            n_samples = self.total_written - start_abs
            if max_samples is not None:
                n_samples = min(n_samples, max_samples)
            if n_samples <= 0:
                return np.zeros(0, dtype=self.dtype)

            start = (self.write_index - (self.total_written - start_abs)) % self.size_samples
            end = start + n_samples
            if end <= self.size_samples:
                return self.buffer[start:end].copy()
            return np.concatenate((self.buffer[start:], self.buffer[:end - self.size_samples]))


class FrameRingBuffer:
    """
    Bounded history of AudioFrames, stored column-wise in numpy arrays.

    Sized to the longest expected session; once full the oldest frames are
    dropped so per-session memory stays constant.
    """

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self.times = np.zeros(capacity, dtype=np.float64)
        self.energies = np.zeros(capacity, dtype=np.float32)
        self.voiced = np.zeros(capacity, dtype=bool)
        self.write_index = 0
        self.full = False
        self.lock = threading.Lock()

    def __len__(self) -> int:
        with self.lock:
            return self.capacity if self.full else self.write_index

    def append(self, frame: AudioFrame):
        with self.lock:
            i = self.write_index
            self.times[i] = frame.time_s
            self.energies[i] = frame.energy
            self.voiced[i] = frame.voiced
            self.write_index = (i + 1) % self.capacity
            if self.write_index == 0:
                self.full = True

    def _ordered(self, column: np.ndarray) -> np.ndarray:
        if not self.full:
            return column[:self.write_index].copy()
        return np.concatenate((column[self.write_index:], column[:self.write_index]))

    def frames(self) -> List[AudioFrame]:
        """Snapshot of the history, oldest first."""
        with self.lock:
            times = self._ordered(self.times)
            energies = self._ordered(self.energies)
            voiced = self._ordered(self.voiced)
        return [
            AudioFrame(time_s=float(t), energy=float(e), voiced=bool(v))
            for t, e, v in zip(times, energies, voiced)
        ]

