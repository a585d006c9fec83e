#!/usr/bin/env python3

import re
import sys

import rfid_base

re_hex_payload = re.compile('[0-9A-Fa-f]{12}')

def _xor_fold(data):
    crc = 0
    for i in range(0, 10, 2):
        crc ^= int(data[i:i+2], 16)
    return crc

def checksum_valid(payload):
    """Check the checksum of a 12 character RDM6300 payload.

    The first 10 characters are 5 hex byte pairs; XORed together they must
    equal the hex byte held in the last 2 characters.
    """
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = payload.decode('ascii')
        except UnicodeDecodeError:
            return False
    payload = ''.join(payload)
    if not re_hex_payload.fullmatch(payload):
        return False
    return _xor_fold(payload) == int(payload[10:12], 16)

def build_frame(tag, leader=0):
    """Build the bytes an RDM6300 sends for a tag, for emulation and tests."""
    if not 0 <= tag <= 0xFFFFFFFF:
        raise ValueError('Tag out of range: %r' % tag)
    if not 0 <= leader <= 0xFF:
        raise ValueError('Leader out of range: %r' % leader)
    data = '%02X%08X' % (leader, tag)
    return (RDM6300Reader.start_code.to_bytes(1, 'big') +
        ('%s%02X' % (data, _xor_fold(data))).encode('ascii') +
        RDM6300Reader.end_code.to_bytes(1, 'big'))

# Read tag transmissions from an RDM6300 via serial port, validate the
# checksum, and convert the tag ID to a zero-padded decimal string.
class RDM6300Reader(rfid_base.RFIDReader):
    def __init__(self, port='/dev/ttyAMA0', **kwargs):
        super(RDM6300Reader, self).__init__(port, **kwargs)

    baud = 9600
    start_code = 0x02
    end_code = 0x03
    leader_len = 2
    tag_len = 8
    crc_len = 2
    payload_len = leader_len + tag_len + crc_len

    def checksum_is_valid(self, payload):
        return checksum_valid(payload)

    def format_tag(self, payload):
        tag = payload[self.leader_len:(self.leader_len+self.tag_len)]
        return '%010d' % int(tag, 16)

    def _convert_validate(self, buf):
        if len(buf) != self.payload_len:
            self.handler.handle_length_mismatch(buf)
            return None
        if not self.checksum_is_valid(buf):
            self.handler.handle_validation_error(buf)
            return None
        return self.format_tag(buf.decode('ascii'))

if __name__ == '__main__':
    tp = rfid_base.TagPrinter(debug=True)
    rdr = RDM6300Reader(sys.argv[1], handler=tp)
    try:
        rdr.run()
    finally:
        rdr.close()
