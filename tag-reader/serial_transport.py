#!/usr/bin/env python3

import serial

# A byte read from the transport
class ByteReceived(object):
    def __init__(self, value):
        self.value = value

    def __eq__(self, other):
        return isinstance(other, ByteReceived) and other.value == self.value

    def __str__(self):
        return 'byte,0x%02x' % self.value

    def __repr__(self):
        return self.__str__()

# Nothing arrived within the read timeout
class NoDataYet(object):
    def __str__(self):
        return 'no-data'

    def __repr__(self):
        return self.__str__()

NO_DATA_YET = NoDataYet()

# Serial port the reader module is attached to. The port has no flush
# primitive the reader can rely on, so reopen() is used to drop whatever is
# buffered below us.
class SerialTransport(object):
    def __init__(self, port, baud=9600, read_timeout=0.1):
        self.port = port
        self.baud = baud
        self.read_timeout = read_timeout
        # serial_for_url accepts plain device paths as well as loop:// etc.
        self.ser = serial.serial_for_url(
            port,
            baudrate=baud,
            bytesize=serial.EIGHTBITS,
            stopbits=serial.STOPBITS_ONE,
            parity=serial.PARITY_NONE,
            timeout=read_timeout)

    def read_byte(self):
        c = self.ser.read(1)
        if not c:
            return NO_DATA_YET
        return ByteReceived(c[0])

    def reopen(self):
        self.ser.close()
        self.ser.open()

    def close(self):
        self.ser.close()
