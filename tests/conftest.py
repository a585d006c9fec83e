import time

import pytest

import serial_transport


class ScriptedTransport(object):
    """Replays a script of bytes and quiet periods to the decode loop.

    Script entries are ``bytes`` (delivered one byte per read) or a float,
    which yields NO_DATA_YET polls for that many seconds.
    """

    def __init__(self, script):
        self.script = list(script)
        self.pending = b""
        self.quiet_until = None
        self.reopens = []
        self.delivered = 0
        self.closed = False

    def read_byte(self):
        if self.quiet_until is not None:
            if time.monotonic() < self.quiet_until:
                time.sleep(0.002)
                return serial_transport.NO_DATA_YET
            self.quiet_until = None
        if not self.pending:
            if not self.script:
                raise RuntimeError("transport script exhausted")
            item = self.script.pop(0)
            if isinstance(item, float):
                self.quiet_until = time.monotonic() + item
                return serial_transport.NO_DATA_YET
            self.pending = item
        byte, self.pending = self.pending[0], self.pending[1:]
        self.delivered += 1
        return serial_transport.ByteReceived(byte)

    def reopen(self):
        self.reopens.append(self.delivered)

    def close(self):
        self.closed = True


class RecordingHandler(object):
    def __init__(self):
        self.events = []

    def kinds(self):
        return [kind for kind, _ in self.events]

    def handle_tag(self, tag, rcv_start_time):
        self.events.append(("tag", tag))

    def handle_data_outside_tag(self, data):
        self.events.append(("outside", data))

    def handle_invalid_byte(self, byte, data):
        self.events.append(("invalid_byte", (byte, data)))

    def handle_timeout(self, data):
        self.events.append(("timeout", data))

    def handle_length_mismatch(self, data):
        self.events.append(("length", data))

    def handle_validation_error(self, data):
        self.events.append(("checksum", data))


@pytest.fixture
def handler():
    return RecordingHandler()


@pytest.fixture
def scripted():
    return ScriptedTransport
