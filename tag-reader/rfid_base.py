#!/usr/bin/env python3

import queue
import sys
import time

import serial_transport
import stall_watchdog

max_ascii = 127

def print_with_timestamp(s):
    print(time.strftime('%Y%m%d %H%M%S'), s)
    # Required for log content to show up in systemd
    sys.stdout.flush()

# Print a tag value, and rejected data when debugging
class TagPrinter(object):
    def __init__(self, debug=False):
        self.debug = debug

    def _diag(self, s):
        if self.debug:
            print_with_timestamp(s)

    def handle_tag(self, tag, rcv_start_time):
        print_with_timestamp('TAG: %s %s' % (tag, rcv_start_time))

    def handle_data_outside_tag(self, data):
        self._diag('OUTSIDE TAG: ' + repr(data))

    def handle_invalid_byte(self, byte, data):
        self._diag('INVALID BYTE 0x%02x; PARTIAL: %s' % (byte, repr(data)))

    def handle_timeout(self, data):
        self._diag('TIMEOUT; PARTIAL: ' + repr(data))

    def handle_length_mismatch(self, data):
        self._diag('BAD LENGTH %d: %s' % (len(data), repr(data)))

    def handle_validation_error(self, data):
        self._diag('INVALID: ' + repr(data))

# Read tag transmissions from an RFID reader via serial port, validate the
# frame, and convert the tag ID to a string. Subclasses describe the framing
# and implement _convert_validate().
class RFIDReader(object):
    def __init__(self, port, handler=None, debug=False, flush_delay=10,
            read_timeout=0.1, watchdog_interval=1.0, transport=None):
        if handler is None:
            handler = TagPrinter(debug)
        self.handler = handler
        self.flush_delay = flush_delay
        self.watchdog_interval = watchdog_interval
        if transport is None:
            transport = serial_transport.SerialTransport(
                port, self.baud, read_timeout)
        self.transport = transport
        self.state = stall_watchdog.DecodeState()

    def close(self):
        self.transport.close()

    def run(self):
        while True:
            tag = self.get_tag()
            self.handler.handle_tag(tag, self.state.rcv_start_time)

    def get_tag(self):
        """Block until a valid tag is presented and return its ID."""
        self.state = stall_watchdog.DecodeState()
        resets = queue.Queue()
        wd = stall_watchdog.StallWatchdog(
            self.state, self.flush_delay, resets, self.watchdog_interval)
        wd.start()
        try:
            while True:
                result = self.transport.read_byte()
                self._drain_resets(resets)
                # Nothing yet; a quiet line is not a stall
                if result is serial_transport.NO_DATA_YET:
                    continue
                tag = self._process_byte(result.value)
                if tag is not None:
                    return tag
        finally:
            wd.cancel()

    def _drain_resets(self, resets):
        while True:
            try:
                generation = resets.get_nowait()
            except queue.Empty:
                return
            # Ignore notices about a frame that has already ended
            if (self.state.receive_started and
                    self.state.generation == generation):
                self.handler.handle_timeout(self.state.payload())
                self._reset_serial_buffer()

    def _process_byte(self, byte):
        state = self.state
        # Waiting for start character?
        if not state.receive_started:
            if byte == self.start_code:
                state.begin_frame()
            else:
                self.handler.handle_data_outside_tag(bytes([byte]))
                self._reset_serial_buffer()
            return None
        # Not ASCII?
        # Line noise; drop the frame and whatever is queued behind it
        if byte > max_ascii:
            self.handler.handle_invalid_byte(byte, state.payload())
            self._reset_serial_buffer()
            return None
        # End character?
        # Process received tag data
        if byte == self.end_code:
            return self._convert_validate(state.finish_frame())
        state.append(byte)
        return None

    def _reset_serial_buffer(self):
        self.state.reset()
        self.transport.reopen()

    def _convert_validate(self, buf):
        raise NotImplementedError
