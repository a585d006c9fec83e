#!/usr/bin/env python3

import queue
import threading
import time

# State of the frame currently being decoded. Only the decode loop writes
# to it; the watchdog thread reads it through stalled_generation().
class DecodeState(object):
    def __init__(self):
        self.lock = threading.Lock()
        self.generation = 0
        self.receive_started = False
        self.buf = bytearray()
        self.time_of_last_byte = time.monotonic()
        self.rcv_start_time = None

    def begin_frame(self):
        with self.lock:
            self.generation += 1
            self.receive_started = True
            self.buf = bytearray()
            self.time_of_last_byte = time.monotonic()
            self.rcv_start_time = time.time()

    def append(self, byte):
        with self.lock:
            self.buf.append(byte)
            self.time_of_last_byte = time.monotonic()

    def payload(self):
        with self.lock:
            return bytes(self.buf)

    def reset(self):
        with self.lock:
            self.receive_started = False
            self.buf = bytearray()
            self.time_of_last_byte = time.monotonic()

    def finish_frame(self):
        """Return the collected payload and go back to idle."""
        with self.lock:
            payload = bytes(self.buf)
            self.receive_started = False
            self.buf = bytearray()
            return payload

    def stalled_generation(self, window, now=None):
        """Return the generation of the in-progress frame if no byte has
        arrived for longer than window seconds, otherwise None."""
        if now is None:
            now = time.monotonic()
        with self.lock:
            if self.receive_started and (now - self.time_of_last_byte) > window:
                return self.generation
            return None

# Watch one get_tag() call for a frame that stopped arriving half way.
# Stalls are posted on the resets queue as the stalled frame's generation;
# the decode loop owns the actual reset.
class StallWatchdog(object):
    def __init__(self, state, flush_delay, resets, interval=1.0):
        self.state = state
        self.flush_delay = flush_delay
        self.resets = resets
        self.interval = interval
        self.last_posted = None

        self.queue = queue.Queue()
        self.thread = threading.Thread(target=self.threadfunc, daemon=True)

    def start(self):
        self.thread.start()

    def cancel(self):
        self.queue.put(None)
        self.thread.join()

    def threadfunc(self):
        while True:
            try:
                self.queue.get(timeout=self.interval)
            except queue.Empty:
                self.check()
            else:
                break

    def check(self):
        generation = self.state.stalled_generation(self.flush_delay)
        if generation is None or generation == self.last_posted:
            return
        self.last_posted = generation
        self.resets.put(generation)
